"""Text sanitization for listing input.

Display sanitization escapes markup and leaves the visible text untouched.
Storage sanitization mutates the text (trim, drop angle brackets, cap the
length) before it is validated or sent upstream.
"""

import html
from typing import Any

MAX_STORED_LENGTH = 10_000


def sanitize_for_display(text: str | None) -> str:
    """Escape ``& < > " '`` so the text renders literally inside a page."""
    if not text:
        return ''
    return html.escape(str(text), quote=True)


def sanitize_for_storage(value: Any) -> str:
    if not value:
        return ''
    cleaned = str(value).strip()
    cleaned = cleaned.replace('<', '').replace('>', '')
    return cleaned[:MAX_STORED_LENGTH]
