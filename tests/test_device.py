import re

import pytest

from campusmarket.services.device import (
    DeviceEnvironment,
    DeviceIdentityService,
    format_device_id,
    string_hash,
    to_base36,
)
from campusmarket.storage.local import DEVICE_ID_KEY, InMemoryStorage

DEVICE_ID_RE = re.compile(r'dev_[0-9a-z]+_[0-9a-z]+')


@pytest.mark.parametrize(
    'text,expected',
    [
        ('', 0),
        ('a', 97),
        ('abc', 96354),
        ('hello', 99162322),
        ('Hello, world', -476288596),
    ],
)
def test_string_hash_matches_java_string_hash(text, expected):
    assert string_hash(text) == expected


def test_string_hash_uses_utf16_code_units():
    # U+1F600 is the surrogate pair D83D DE00
    assert string_hash('\U0001F600') == 0xD83D * 31 + 0xDE00


@pytest.mark.parametrize('number,expected', [(0, '0'), (35, 'z'), (36, '10'), (1_700_000_000_000, 'loyw3v28')])
def test_to_base36(number, expected):
    assert to_base36(number) == expected


def test_to_base36_rejects_negative():
    with pytest.raises(ValueError):
        to_base36(-1)


def test_fingerprint_joins_components(environment):
    assert environment.fingerprint(123) == (
        'Mozilla/5.0 (X11; Linux x86_64) Firefox/128.0|en-ZA|1920x1080|24|-120|true|true|123'
    )


def test_format_device_id():
    assert format_device_id('abc', 36) == 'dev_22ci_10'
    assert format_device_id('Hello, world', 0) == 'dev_7vkims_0'


def test_resolve_device_id_generates_and_persists(device_identity, storage, clock):
    device_id = device_identity.resolve_device_id()

    assert DEVICE_ID_RE.fullmatch(device_id)
    assert device_id.endswith('_' + to_base36(clock.now_ms))
    assert storage.get_item(DEVICE_ID_KEY) == device_id


def test_resolve_device_id_is_stable(device_identity, clock):
    first = device_identity.resolve_device_id()
    clock.advance(60_000)

    assert device_identity.resolve_device_id() == first


def test_resolve_device_id_returns_stored_value():
    storage = InMemoryStorage({DEVICE_ID_KEY: 'dev_existing_1'})

    def _fail():
        raise AssertionError('environment should not be inspected')

    service = DeviceIdentityService(storage=storage, environment_factory=_fail)

    assert service.resolve_device_id() == 'dev_existing_1'


def test_detect_environment_describes_host():
    environment = DeviceEnvironment.detect()

    assert environment.user_agent.startswith('Python/')
    assert environment.language
    assert environment.session_storage is True
    assert environment.local_storage is True


def test_string_hash_accepts_lone_surrogates():
    assert string_hash('\ud83d') == 0xD83D
