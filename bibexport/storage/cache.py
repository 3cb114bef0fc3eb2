"""Record cache.

Serialized records are cached by item identity, dialect and citekey,
so an unchanged item does not have to be encoded again. The cache can
be persisted to a JSON file between runs.
"""

import logging
import threading
from pathlib import Path

import msgspec

from ..core.config import Dialect

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str, str]


class CacheEntry(msgspec.Struct, kw_only=True):
    """One cached record, as stored on disk."""

    item_id: str
    dialect: str
    citekey: str
    text: str


class RecordCache:
    """Thread-safe in-memory record cache."""

    def __init__(self):
        self._entries: dict[CacheKey, str] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def _key(item_id: int | str, dialect: Dialect | str, citekey: str) -> CacheKey:
        if isinstance(dialect, Dialect):
            dialect = dialect.value
        return (str(item_id), dialect, citekey)

    def get(self, item_id: int | str, dialect: Dialect | str, citekey: str) -> str | None:
        """Get the cached text of a record, if present."""
        key = self._key(item_id, dialect, citekey)
        with self._lock:
            text = self._entries.get(key)
            if text is None:
                self.misses += 1
            else:
                self.hits += 1
                logger.debug(f"Cache hit for {citekey}")
            return text

    def store(
        self, item_id: int | str, dialect: Dialect | str, citekey: str, text: str
    ) -> None:
        """Store the text of a record."""
        with self._lock:
            self._entries[self._key(item_id, dialect, citekey)] = text

    def invalidate(self, item_id: int | str) -> int:
        """Drop every cached record of an item.

        Returns:
            Number of entries removed.
        """
        item_id = str(item_id)
        with self._lock:
            keys = [key for key in self._entries if key[0] == item_id]
            for key in keys:
                del self._entries[key]
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        with self._lock:
            return self._key(*key) in self._entries

    def save(self, path: Path | str) -> None:
        """Write the cache to a JSON file."""
        path = Path(path)
        with self._lock:
            entries = [
                CacheEntry(item_id=key[0], dialect=key[1], citekey=key[2], text=text)
                for key, text in self._entries.items()
            ]
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(msgspec.json.encode(entries))
        logger.debug(f"Saved {len(entries)} cached records to {path}")

    @classmethod
    def load(cls, path: Path | str) -> "RecordCache":
        """Read a cache file.

        A missing or unreadable file yields an empty cache.
        """
        cache = cls()
        path = Path(path)
        if not path.exists():
            return cache

        try:
            entries = msgspec.json.decode(path.read_bytes(), type=list[CacheEntry])
        except (OSError, msgspec.DecodeError) as e:
            logger.warning(f"Ignoring unreadable cache {path}: {e}")
            return cache

        for entry in entries:
            cache.store(entry.item_id, entry.dialect, entry.citekey, entry.text)
        return cache
