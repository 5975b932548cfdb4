"""Local key-value persistence for client-side state.

Holds the session token, member snapshot, login attempt counter and bookmark
set. None of it is written back to Airtable; it is advisory, UI-only state.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

TOKEN_KEY = "crxq_token"
MEMBER_KEY = "crxq_member"
LOGIN_ATTEMPTS_KEY = "crxq_login_attempts"
BOOKMARKS_KEY = "crxq_bookmarks"


class KeyValueStore(ABC):
    """String key -> string value store."""

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None: ...


class MemoryStore(KeyValueStore):
    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Store persisted as a single JSON object on disk.

    A missing or corrupt file reads as empty; every write rewrites the file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable store %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


# === Typed helpers over the raw store ===


def load_bookmarks(store: KeyValueStore) -> set[str]:
    raw = store.get(BOOKMARKS_KEY)
    if not raw:
        return set()
    try:
        ids = json.loads(raw)
    except json.JSONDecodeError:
        return set()
    return {str(i) for i in ids} if isinstance(ids, list) else set()


def save_bookmarks(store: KeyValueStore, bookmarks: set[str]) -> None:
    store.set(BOOKMARKS_KEY, json.dumps(sorted(bookmarks)))
