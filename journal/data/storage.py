from __future__ import annotations

import json
import logging
import os
import threading

logger = logging.getLogger(__name__)


class KeyValueStorage:
    """String key to string value store, the shape of a browser's localStorage."""

    def get_item(self, key: str) -> str | None:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: dict | None = None):
        self._items = dict(initial or {})

    def get_item(self, key):
        return self._items.get(key)

    def set_item(self, key, value):
        self._items[key] = str(value)

    def remove_item(self, key):
        self._items.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            logger.warning("Ignoring malformed storage file %s", self.path)
            return {}
        return payload

    def _write(self, payload: dict) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def get_item(self, key):
        with self._lock:
            return self._read().get(key)

    def set_item(self, key, value):
        with self._lock:
            payload = self._read()
            payload[key] = str(value)
            self._write(payload)

    def remove_item(self, key):
        with self._lock:
            payload = self._read()
            if key in payload:
                del payload[key]
                self._write(payload)
