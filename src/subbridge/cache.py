"""In-memory translation cache with a time-to-live."""

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from typing import Callable

from .models import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL = 24 * 60 * 60  # seconds


def make_key(content: str, source_lang: str, target_lang: str) -> str:
    """Create a cache key from subtitle content and the language pair."""
    content_hash = hashlib.md5(content.encode("utf-8")).hexdigest()
    return f"{content_hash}_{source_lang}_{target_lang}"


class TranslationCache:
    """Content-addressed store of translated subtitle documents.

    Entries expire ``ttl`` seconds after insertion. Expired entries are
    dropped on lookup and by ``purge_expired``. The clock is injectable so
    expiry can be tested without waiting.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int | None = None,
    ):
        self.ttl = ttl
        self._clock = clock
        self._max_entries = max_entries
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        """Get a cached translation if present and not expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock(), self.ttl):
                del self._entries[key]
                logger.debug("Cache entry %s expired", key)
                return None
            return entry.value

    def put(self, key: str, value: str) -> None:
        """Store a complete translation; its TTL starts now."""
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(key=key, value=value, created_at=self._clock())
            if self._max_entries is not None:
                while len(self._entries) > self._max_entries:
                    self._entries.popitem(last=False)

    def _drop_expired(self) -> int:
        # Caller holds self._lock.
        now = self._clock()
        expired = [
            key for key, entry in self._entries.items()
            if entry.is_expired(now, self.ttl)
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        with self._lock:
            removed = self._drop_expired()
        if removed:
            logger.debug("Purged %d expired cache entries", removed)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        """Number of live entries; expired ones are dropped first."""
        with self._lock:
            self._drop_expired()
            return len(self._entries)
