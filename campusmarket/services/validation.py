import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from campusmarket.schemas.listing import ListingDraft, ListingValidationOutcome, ValidationResult
from campusmarket.services.rate_limit import RateLimiter
from campusmarket.services.sanitize import sanitize_for_storage

logger = logging.getLogger(__name__)

PROHIBITED_CONTENT_ERROR = 'Your listing contains prohibited content. Please revise and try again.'


@dataclass(frozen=True)
class FieldRule:
    error_message: str
    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern | None = None
    min_value: float | None = None
    max_value: float | None = None


VALIDATION_RULES: Mapping[str, FieldRule] = MappingProxyType(
    {
        'title': FieldRule(
            min_length=5,
            max_length=60,
            pattern=re.compile(r'[a-zA-Z0-9\s\-_.,!?()]+'),
            error_message='Title must be 5-60 characters (letters, numbers, basic punctuation only)',
        ),
        'description': FieldRule(
            min_length=10,
            max_length=2000,
            error_message='Description must be 10-2000 characters',
        ),
        'price': FieldRule(
            min_value=10,
            max_value=1_000_000,
            error_message='Price must be between R10 and R1,000,000',
        ),
        'sellerName': FieldRule(
            min_length=2,
            max_length=50,
            pattern=re.compile(r"[a-zA-Z\s\-'.]+"),
            error_message='Name must be 2-50 characters (letters only)',
        ),
        'sellerPhone': FieldRule(
            pattern=re.compile(r'0[0-9]{9}'),
            error_message='Phone must be 10 digits starting with 0',
        ),
    }
)

# (rule name, draft attribute), in evaluation order
LISTING_FIELDS = (
    ('title', 'title'),
    ('description', 'description'),
    ('price', 'price'),
    ('sellerName', 'seller_name'),
    ('sellerPhone', 'seller_phone'),
)

SANITIZED_ATTRIBUTES = ('title', 'description', 'seller_name', 'seller_phone')

SPAM_KEYWORDS = (
    'viagra',
    'cialis',
    'porn',
    'xxx',
    'casino',
    'lottery',
    'bitcoin scam',
    'get rich quick',
    'work from home',
    'guaranteed income',
    'click here',
    'limited time offer',
    'act now',
    'buy now',
    'free money',
)

PROFANITY_LIST = ('fuck', 'shit', 'bitch', 'asshole', 'damn', 'crap', 'piss')

_PROFANITY_RE = re.compile(
    r'\b(?:' + '|'.join(re.escape(word) for word in PROFANITY_LIST) + r')\b',
    re.IGNORECASE | re.ASCII,
)

# leading decimal number, the rest of the text is ignored
_LEADING_NUMBER_RE = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?', re.ASCII)


def _parse_price(value: str) -> float | None:
    match = _LEADING_NUMBER_RE.match(value)
    if match is None:
        return None
    return float(match.group())


def validate_field(field_name: str, value: Any) -> ValidationResult:
    rule = VALIDATION_RULES.get(field_name)
    if rule is None:
        return ValidationResult.ok()

    clean_value = sanitize_for_storage(value)

    if rule.min_length is not None and len(clean_value) < rule.min_length:
        return ValidationResult.fail(rule.error_message)

    if rule.max_length is not None and len(clean_value) > rule.max_length:
        return ValidationResult.fail(rule.error_message)

    if rule.pattern is not None and rule.pattern.fullmatch(clean_value) is None:
        return ValidationResult.fail(rule.error_message)

    if field_name == 'price':
        number = _parse_price(clean_value)
        if number is None or number < rule.min_value or number > rule.max_value:
            return ValidationResult.fail(rule.error_message)

    return ValidationResult.ok(clean_value)


def contains_spam(text: str) -> bool:
    lower_text = text.lower()
    return any(keyword in lower_text for keyword in SPAM_KEYWORDS)


def contains_profanity(text: str) -> bool:
    return _PROFANITY_RE.search(text) is not None


def validate_listing_data(
    data: ListingDraft | Mapping[str, Any], rate_limiter: RateLimiter
) -> ListingValidationOutcome:
    """Run the full listing pipeline and collect every user-facing error.

    Field errors come first in rule order, then the prohibited-content error,
    then the rate-limit error. Profanity only raises ``flagged_for_review``.
    The sanitized copy is always built, valid or not, so the caller can
    redisplay it safely.
    """
    draft = data if isinstance(data, ListingDraft) else ListingDraft.model_validate(dict(data))
    errors: list[str] = []

    for rule_name, attribute in LISTING_FIELDS:
        check = validate_field(rule_name, getattr(draft, attribute))
        if not check.valid:
            errors.append(check.error)

    text_to_check = f'{draft.title or ""} {draft.description or ""}'
    if contains_spam(text_to_check):
        logger.info('Spam keywords detected in listing title=%r', draft.title)
        errors.append(PROHIBITED_CONTENT_ERROR)

    flagged_for_review = contains_profanity(text_to_check)
    if flagged_for_review:
        logger.warning('Profanity detected in listing title=%r, flagging for review', draft.title)

    rate_limit = rate_limiter.check()
    if not rate_limit.allowed:
        errors.append(rate_limit.error)

    sanitized_data = draft.model_copy(
        update={attribute: sanitize_for_storage(getattr(draft, attribute)) for attribute in SANITIZED_ATTRIBUTES}
    )

    return ListingValidationOutcome(
        valid=not errors,
        errors=errors,
        sanitized_data=sanitized_data,
        flagged_for_review=flagged_for_review,
    )
