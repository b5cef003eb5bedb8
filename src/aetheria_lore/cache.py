"""
TTL-based cache for parsed lore documents.

Parsing YAML data files and Markdown documents is the most expensive step
of every request, so the storage layer keeps parsed results here. The cache
is an explicit object owned by whoever builds the storage layer; entries
expire after a TTL and are dropped as soon as the underlying file's
modification time changes.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

logger = logging.getLogger("aetheria-lore")

T = TypeVar("T")


@dataclass
class CacheEntry:
    """Single cache entry with TTL metadata.

    Attributes:
        key: Cache key identifier (usually the file path).
        value: Parsed payload.
        created_at: Timestamp when entry was created.
        ttl: Time to live in seconds.
        mtime: Modification time of the source file when it was parsed.
    """
    key: str
    value: Any
    created_at: float
    ttl: float
    mtime: float | None = None


@dataclass
class CacheStats:
    """Statistics for the document cache.

    Attributes:
        total_entries: Number of entries currently in cache.
        hit_count: Number of successful cache lookups.
        miss_count: Number of failed cache lookups.
        expired_count: Number of entries that expired or went stale on access.
        invalidated_count: Number of entries explicitly invalidated.
        hit_rate: Ratio of hits to total lookups (0.0-1.0).
    """
    total_entries: int
    hit_count: int
    miss_count: int
    expired_count: int
    invalidated_count: int
    hit_rate: float


class DocumentCache:
    """TTL cache for parsed documents keyed by file path.

    Features:
    - TTL-based expiration (``default_ttl=0`` disables caching)
    - Staleness detection through the source file's mtime
    - Pattern-based invalidation (e.g. everything under ``data/``)
    - Performance statistics tracking

    Usage:
        cache = DocumentCache(default_ttl=300)
        data = cache.get_or_load(path, lambda p: yaml.safe_load(p.read_text()))
        cache.invalidate("creatures")
    """

    def __init__(self, default_ttl: float = 300) -> None:
        """Initialize the document cache.

        Args:
            default_ttl: Default time to live for cache entries in seconds.
        """
        if default_ttl < 0:
            raise ValueError("default_ttl must be >= 0")
        self._cache: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.default_ttl = default_ttl
        self._hit_count = 0
        self._miss_count = 0
        self._expired_count = 0
        self._invalidated_count = 0

    @property
    def enabled(self) -> bool:
        return self.default_ttl > 0

    def store(
        self,
        key: str,
        value: Any,
        mtime: float | None = None,
        ttl: float | None = None,
    ) -> None:
        """Store a parsed payload.

        If an entry with the same key already exists, it is replaced.

        Args:
            key: Unique cache key.
            value: Parsed payload.
            mtime: Source modification time, compared on later lookups.
            ttl: Time to live in seconds. Uses default_ttl if not specified.
        """
        effective_ttl = ttl if ttl is not None else self.default_ttl
        if effective_ttl <= 0:
            return

        entry = CacheEntry(
            key=key,
            value=value,
            created_at=time.time(),
            ttl=effective_ttl,
            mtime=mtime,
        )
        with self._lock:
            self._cache[key] = entry
        logger.debug(f"Document cache: stored '{key}' (TTL: {effective_ttl}s)")

    def get(self, key: str, mtime: float | None = None) -> Any | None:
        """Retrieve a cached payload.

        Returns None if the key is not found, the entry has expired, or
        ``mtime`` differs from the one recorded at store time. Expired and
        stale entries are removed on access.

        Args:
            key: Cache key to look up.
            mtime: Current modification time of the source, if known.

        Returns:
            The cached payload, or None.
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._miss_count += 1
                return None

            stale = mtime is not None and entry.mtime is not None and mtime != entry.mtime
            if stale or self._is_expired(entry):
                del self._cache[key]
                self._expired_count += 1
                self._miss_count += 1
                logger.debug(f"Document cache: entry '{key}' {'stale' if stale else 'expired'}")
                return None

            self._hit_count += 1
            return entry.value

    def get_or_load(self, path: Path, loader: Callable[[Path], T]) -> T:
        """Return the cached parse of ``path``, parsing it with ``loader`` on a miss.

        Args:
            path: File to load.
            loader: Callable turning the path into a parsed payload.

        Returns:
            The parsed payload.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        key = str(path)
        mtime = path.stat().st_mtime
        cached = self.get(key, mtime=mtime)
        if cached is not None:
            return cached

        value = loader(path)
        self.store(key, value, mtime=mtime)
        return value

    def invalidate(self, pattern: str) -> int:
        """Invalidate cache entries whose keys contain the pattern.

        Args:
            pattern: Substring pattern to match against cache keys.

        Returns:
            Number of entries invalidated.
        """
        with self._lock:
            matching_keys = [key for key in self._cache if pattern in key]
            for key in matching_keys:
                del self._cache[key]
                self._invalidated_count += 1

        if matching_keys:
            logger.debug(
                f"Document cache: invalidated {len(matching_keys)} entries "
                f"matching pattern '{pattern}'"
            )
        return len(matching_keys)

    def invalidate_key(self, key: str) -> bool:
        """Invalidate a single cache entry by exact key.

        Returns:
            True if the entry existed and was removed, False otherwise.
        """
        with self._lock:
            if key in self._cache:
                del self._cache[key]
                self._invalidated_count += 1
                return True
        return False

    def clear(self) -> None:
        """Remove all entries from the cache."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
        if count > 0:
            logger.debug(f"Document cache: cleared {count} entries")

    def cleanup_expired(self) -> int:
        """Remove all expired entries from the cache.

        Returns:
            Number of expired entries removed.
        """
        with self._lock:
            expired_keys = [
                key for key, entry in self._cache.items()
                if self._is_expired(entry)
            ]
            for key in expired_keys:
                del self._cache[key]
                self._expired_count += 1

        if expired_keys:
            logger.debug(f"Document cache: cleanup removed {len(expired_keys)} expired entries")
        return len(expired_keys)

    def get_stats(self) -> CacheStats:
        """Return cache performance statistics."""
        with self._lock:
            total_lookups = self._hit_count + self._miss_count
            hit_rate = self._hit_count / total_lookups if total_lookups > 0 else 0.0
            return CacheStats(
                total_entries=len(self._cache),
                hit_count=self._hit_count,
                miss_count=self._miss_count,
                expired_count=self._expired_count,
                invalidated_count=self._invalidated_count,
                hit_rate=hit_rate,
            )

    @staticmethod
    def _is_expired(entry: CacheEntry) -> bool:
        return (time.time() - entry.created_at) > entry.ttl

    @property
    def size(self) -> int:
        """Return the number of entries currently in the cache."""
        return len(self._cache)


__all__ = [
    "DocumentCache",
    "CacheEntry",
    "CacheStats",
]
