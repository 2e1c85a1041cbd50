"""Client-side key/value storage for the login session."""

import json
import os
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

TOKEN_KEY = "token"
USERNAME_KEY = "username"
LAST_ACTIVITY_KEY = "lastActivityTime"  # Epoch milliseconds, as a string

SESSION_KEYS = (TOKEN_KEY, USERNAME_KEY, LAST_ACTIVITY_KEY)


class LocalStorage:
    """String key/value store persisted as a JSON file.

    With no path the values live in memory only. Every write is flushed
    immediately, so the file survives the process being killed.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._items: dict[str, str] = self._load()

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()

    def remove_items(self, keys: tuple[str, ...]) -> None:
        """Remove several keys with a single write."""
        removed = [key for key in keys if self._items.pop(key, None) is not None]
        if removed:
            self._flush()

    def keys(self) -> list[str]:
        return list(self._items)

    def _load(self) -> dict[str, str]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("client_storage_unreadable", path=str(self._path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("client_storage_unreadable", path=str(self._path), error="not an object")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._items), encoding="utf-8")
        os.replace(tmp_path, self._path)
