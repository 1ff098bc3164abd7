# core/storage.py

"""
Durable key/value storage for the operator session.

Plays the role browser local storage plays for a web console: string values
under string keys, written through to a JSON file when a path is configured.
Without a path everything stays in memory (tests, throwaway sessions).
"""

import json
import os
from pathlib import Path
from threading import Lock
from typing import Dict, Optional

from core.config import settings
from core.logging_config import logger


class LocalStorage:
    """
    String key/value store, optionally persisted as one JSON object.

    Thread-safe for concurrent access.
    """

    def __init__(self, path: Optional[str] = None):
        self._path = Path(path) if path else None
        self._items: Dict[str, str] = {}
        self._lock = Lock()
        self._load()

    def _load(self):
        if self._path is None or not self._path.exists():
            return

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Session storage at {self._path} is unreadable, starting empty: {e}")
            return

        if isinstance(data, dict):
            self._items = {k: v for k, v in data.items() if isinstance(v, str)}

    def _flush(self):
        if self._path is None:
            return

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._items), encoding="utf-8")
        os.replace(tmp_path, self._path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str):
        with self._lock:
            self._items[key] = value
            self._flush()

    def remove_item(self, key: str):
        with self._lock:
            if self._items.pop(key, None) is not None:
                self._flush()

    def clear(self):
        with self._lock:
            self._items.clear()
            self._flush()

    def keys(self):
        with self._lock:
            return list(self._items)


_storage: Optional[LocalStorage] = None


def get_storage() -> LocalStorage:
    """Get the process-wide session storage (created on first use)."""
    global _storage
    if _storage is None:
        _storage = LocalStorage(settings.SESSION_STORAGE_PATH)
    return _storage
