"""
Persistence stores

A store is a string-keyed mapping of string values, the shape of a browser's
local storage. World state is written as JSON documents under fixed keys.
"""
import json
import logging
import os
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Saved state is missing, unreadable or malformed"""


class Storage:
    """Base class for string-keyed stores"""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(Storage):
    """Store kept in a dictionary, mainly for tests"""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileStorage(Storage):
    """
    Store kept as a single JSON object on disk

    Every write rewrites the whole file through a temporary file, so an
    interrupted save leaves the previous contents in place.
    """

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                items = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"cannot read {self.path}: {e}") from e
        if not isinstance(items, dict):
            raise PersistenceError(f"{self.path} does not hold a JSON object")
        return items

    def _write(self, items: Dict[str, str]) -> None:
        tmp_path = self.path + '.tmp'
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(items, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"cannot write {self.path}: {e}") from e
        logger.debug("Wrote %d keys to %s", len(items), self.path)

    def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        if value is not None and not isinstance(value, str):
            raise PersistenceError(f"value for '{key}' in {self.path} is not a string")
        return value

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if items.pop(key, None) is not None:
            self._write(items)
