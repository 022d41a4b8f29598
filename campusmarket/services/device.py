import locale
import logging
import platform
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from campusmarket.storage.local import DEVICE_ID_KEY, LocalStorage

logger = logging.getLogger(__name__)

_BASE36_DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'


@dataclass(frozen=True)
class DeviceEnvironment:
    user_agent: str
    language: str
    screen_width: int
    screen_height: int
    color_depth: int
    timezone_offset: int
    session_storage: bool = True
    local_storage: bool = True

    @classmethod
    def detect(cls) -> 'DeviceEnvironment':
        """Describe the current host for callers that are not a browser.

        ``timezone_offset`` follows the browser convention: minutes to add to
        local time to reach UTC, so zones east of UTC are negative.
        """
        utc_offset = datetime.now().astimezone().utcoffset()
        offset_minutes = -int(utc_offset.total_seconds() // 60) if utc_offset is not None else 0
        try:
            language = locale.getlocale()[0] or 'en_US'
        except ValueError:
            language = 'en_US'
        return cls(
            user_agent=f'Python/{platform.python_version()} ({platform.system()} {platform.release()})',
            language=language.replace('_', '-'),
            screen_width=0,
            screen_height=0,
            color_depth=0,
            timezone_offset=offset_minutes,
        )

    def fingerprint(self, timestamp_ms: int) -> str:
        components = [
            self.user_agent,
            self.language,
            f'{self.screen_width}x{self.screen_height}',
            str(self.color_depth),
            str(self.timezone_offset),
            _js_bool(self.session_storage),
            _js_bool(self.local_storage),
            str(timestamp_ms),
        ]
        return '|'.join(components)


def _js_bool(value: bool) -> str:
    return 'true' if value else 'false'


def string_hash(text: str) -> int:
    """32-bit multiplicative string hash (h = h * 31 + c) over UTF-16 code units.

    Returns a signed 32-bit integer. Not a cryptographic digest.
    """
    encoded = text.encode('utf-16-le', errors='surrogatepass')
    h = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + code_unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError('to_base36 expects a non-negative integer')
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return ''.join(reversed(digits))


def format_device_id(fingerprint: str, timestamp_ms: int) -> str:
    return f'dev_{to_base36(abs(string_hash(fingerprint)))}_{to_base36(timestamp_ms)}'


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class DeviceIdentityService:
    storage: LocalStorage
    environment_factory: Callable[[], DeviceEnvironment] = field(default=DeviceEnvironment.detect)
    clock: Callable[[], int] = field(default=_now_ms)

    def resolve_device_id(self) -> str:
        device_id = self.storage.get_item(DEVICE_ID_KEY)
        if device_id:
            return device_id

        timestamp_ms = self.clock()
        fingerprint = self.environment_factory().fingerprint(timestamp_ms)
        device_id = format_device_id(fingerprint, timestamp_ms)

        self.storage.set_item(DEVICE_ID_KEY, device_id)
        logger.info('Generated new device id %s', device_id)
        return device_id
