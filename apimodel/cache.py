# File: apimodel/cache.py
"""
apimodel - Parsed Document Cache
==================================
In-memory TTL cache for parse results, backed by ``cachetools.TTLCache``.

Entries are keyed by the sha256 of the source string (path or URL) and
remember the sha256 of the document content they were built from.  A
lookup misses when:

    - the entry is older than ``ttl`` seconds (``ttl == 0`` never expires),
    - the caller passes a content hash that differs from the stored one
      (the document changed on disk or remotely).

Both cases evict the entry.  When more than ``maxsize`` sources are
cached the least recently used one is dropped.  The clock is injectable
for tests.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from cachetools import TTLCache

from apimodel.utils import sha256_hex

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.cache")


@dataclass(frozen=True, slots=True)
class CacheEntry:
    source: str
    content_hash: str
    value: Any


class DocumentCache:
    """
    Source-keyed cache with TTL and content-hash invalidation.

    Usage::

        cache = DocumentCache(ttl=3600)
        result = cache.get(source, content_hash)
        if result is None:
            result = build(...)
            cache.put(source, content_hash, result)
    """

    def __init__(
        self,
        ttl: int = 3600,
        clock: Optional[Callable[[], float]] = None,
        maxsize: int = 128,
    ) -> None:
        self.ttl: int = ttl
        self.maxsize: int = maxsize
        # ttl == 0 means "never expire"
        self._entries: TTLCache = TTLCache(
            maxsize=maxsize,
            ttl=ttl if ttl > 0 else math.inf,
            timer=clock or time.time,
        )
        self.hits: int = 0
        self.misses: int = 0

    @staticmethod
    def key_for(source: str) -> str:
        return sha256_hex(source)

    def get(self, source: str, content_hash: Optional[str] = None) -> Optional[Any]:
        """Cached value for *source*, or ``None`` on a miss."""
        self._entries.expire()
        key: str = self.key_for(source)
        entry: Optional[CacheEntry] = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        if content_hash is not None and content_hash != entry.content_hash:
            logger.info("Content changed for %s; cached parse discarded", source)
            del self._entries[key]
            self.misses += 1
            return None

        self.hits += 1
        logger.debug("Cache hit for %s", source)
        return entry.value

    def put(self, source: str, content_hash: str, value: Any) -> None:
        self._entries[self.key_for(source)] = CacheEntry(
            source=source,
            content_hash=content_hash,
            value=value,
        )
        logger.debug("Cached parse result for %s", source)

    def invalidate(self, source: str) -> bool:
        """Drop the entry for *source*; ``True`` if one existed."""
        return self._entries.pop(self.key_for(source), None) is not None

    def clear(self) -> int:
        self._entries.expire()
        count: int = len(self._entries)
        self._entries.clear()
        logger.info("Cleared %d cached parse results", count)
        return count

    def sources(self) -> List[str]:
        self._entries.expire()
        return [entry.source for entry in self._entries.values()]

    def __contains__(self, source: object) -> bool:
        return isinstance(source, str) and self.key_for(source) in self._entries

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<DocumentCache {len(self)} entries, ttl={self.ttl}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CacheEntry",
    "DocumentCache",
]

logger.debug("apimodel.cache loaded: %d public symbols.", len(__all__))
