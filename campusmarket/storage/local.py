import json
import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

RATE_LIMIT_KEY = 'last_listing_submit'
DEVICE_ID_KEY = 'device_id'
SELLER_PHONE_KEY = 'seller_phone'
SELLER_NAME_KEY = 'seller_name'


class LocalStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryStorage:
    def __init__(self, items: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """Key-value storage persisted as a single JSON object on disk.

    The file is read once on construction and rewritten on every change, so
    values survive process restarts the way browser storage survives page
    reloads.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._items: dict[str, str] = self._read()

    @classmethod
    def from_env(cls) -> 'JsonFileStorage':
        return cls(os.getenv('CAMPUSMARKET_STORAGE_PATH', '.campusmarket_storage.json'))

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)
        self._write()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._write()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning('Local storage file %s is unreadable, starting empty: %s', self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning('Local storage file %s does not hold an object, starting empty', self.path)
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(self._items, f)
        tmp_path.replace(self.path)
