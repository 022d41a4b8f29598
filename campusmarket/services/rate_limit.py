import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable

from campusmarket.schemas.listing import RateLimitStatus
from campusmarket.storage.local import RATE_LIMIT_KEY, LocalStorage

logger = logging.getLogger(__name__)

RATE_LIMIT_MS = 5 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class RateLimiter:
    storage: LocalStorage
    clock: Callable[[], int] = field(default=_now_ms)
    cooldown_ms: int = RATE_LIMIT_MS

    def check(self) -> RateLimitStatus:
        last_submit = self.storage.get_item(RATE_LIMIT_KEY)
        if not last_submit:
            return RateLimitStatus(allowed=True)

        try:
            last_submit_ms = int(last_submit)
        except ValueError:
            logger.warning('Ignoring unparsable rate limit timestamp: %r', last_submit)
            return RateLimitStatus(allowed=True)

        time_remaining = self.cooldown_ms - (self.clock() - last_submit_ms)
        if time_remaining > 0:
            minutes_left = math.ceil(time_remaining / 60000)
            return RateLimitStatus(
                allowed=False,
                minutes_remaining=minutes_left,
                error=f'Please wait {minutes_left} more minute(s) before submitting another listing.',
            )

        return RateLimitStatus(allowed=True)

    def record_submission(self) -> None:
        self.storage.set_item(RATE_LIMIT_KEY, str(self.clock()))


def check_rate_limit(rate_limiter: RateLimiter) -> RateLimitStatus:
    return rate_limiter.check()


def record_submission(rate_limiter: RateLimiter) -> None:
    rate_limiter.record_submission()
