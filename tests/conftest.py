import pytest

from campusmarket.services.device import DeviceEnvironment, DeviceIdentityService
from campusmarket.services.rate_limit import RateLimiter
from campusmarket.storage.local import InMemoryStorage

START_MS = 1_700_000_000_000


class FakeClock:
    def __init__(self, now_ms: int = START_MS):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(storage, clock):
    return RateLimiter(storage=storage, clock=clock)


@pytest.fixture
def environment():
    return DeviceEnvironment(
        user_agent='Mozilla/5.0 (X11; Linux x86_64) Firefox/128.0',
        language='en-ZA',
        screen_width=1920,
        screen_height=1080,
        color_depth=24,
        timezone_offset=-120,
    )


@pytest.fixture
def device_identity(storage, environment, clock):
    return DeviceIdentityService(storage=storage, environment_factory=lambda: environment, clock=clock)


@pytest.fixture
def valid_listing_data():
    return {
        'title': 'Calculus textbook',
        'description': 'Stewart 8th edition, barely used, no highlighting.',
        'price': '250',
        'seller_name': "Thandi O'Neil",
        'seller_phone': '0821234567',
    }
