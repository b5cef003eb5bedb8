"""
Tests for DocumentCache.

Tests cover:
- Store and retrieve
- TTL expiration and mtime staleness
- get_or_load parsing on miss only
- Pattern-based and key-based invalidation
- Statistics tracking
"""

from __future__ import annotations

import os
import time

import pytest

from aetheria_lore.cache import CacheStats, DocumentCache


# ============================================================================
# Basic Store and Get Tests
# ============================================================================


class TestDocumentCacheBasic:
    """Test basic store and get operations."""

    def test_store_and_get(self):
        """Test storing and retrieving a payload."""
        cache = DocumentCache(default_ttl=60)
        cache.store("data/creatures.yaml", {"dragons": {}})
        assert cache.get("data/creatures.yaml") == {"dragons": {}}

    def test_get_nonexistent_returns_none(self):
        """Test that getting a nonexistent key returns None."""
        assert DocumentCache().get("missing") is None

    def test_zero_ttl_disables_caching(self):
        """Test that default_ttl=0 stores nothing."""
        cache = DocumentCache(default_ttl=0)
        cache.store("key", "value")
        assert not cache.enabled
        assert cache.get("key") is None
        assert cache.size == 0

    def test_negative_ttl_rejected(self):
        """Test constructor validation."""
        with pytest.raises(ValueError):
            DocumentCache(default_ttl=-1)


# ============================================================================
# Expiration Tests
# ============================================================================


class TestDocumentCacheExpiration:
    """Test TTL and staleness handling."""

    def test_expired_entry_is_dropped(self):
        """Test that entries expire after their TTL."""
        cache = DocumentCache(default_ttl=60)
        cache.store("key", "value", ttl=0.05)
        time.sleep(0.1)
        assert cache.get("key") is None
        assert cache.get_stats().expired_count == 1

    def test_changed_mtime_is_stale(self):
        """Test that a newer file modification time invalidates the entry."""
        cache = DocumentCache(default_ttl=60)
        cache.store("key", "value", mtime=100.0)
        assert cache.get("key", mtime=100.0) == "value"
        assert cache.get("key", mtime=200.0) is None
        assert cache.size == 0

    def test_cleanup_expired(self):
        """Test bulk removal of expired entries."""
        cache = DocumentCache(default_ttl=60)
        cache.store("old", "value", ttl=0.05)
        cache.store("fresh", "value")
        time.sleep(0.1)
        assert cache.cleanup_expired() == 1
        assert cache.get("fresh") == "value"


# ============================================================================
# get_or_load Tests
# ============================================================================


class TestGetOrLoad:
    """Test loading through the cache."""

    def test_loader_called_once(self, tmp_path):
        """Test that a second lookup is served from the cache."""
        path = tmp_path / "doc.md"
        path.write_text("hello")
        calls = []

        def loader(p):
            calls.append(p)
            return p.read_text()

        cache = DocumentCache(default_ttl=60)
        assert cache.get_or_load(path, loader) == "hello"
        assert cache.get_or_load(path, loader) == "hello"
        assert len(calls) == 1

    def test_modified_file_is_reparsed(self, tmp_path):
        """Test that editing the file forces a reload."""
        path = tmp_path / "doc.md"
        path.write_text("first")
        cache = DocumentCache(default_ttl=60)
        assert cache.get_or_load(path, lambda p: p.read_text()) == "first"

        path.write_text("second")
        stat = path.stat()
        os.utime(path, (stat.st_atime, stat.st_mtime + 10))
        assert cache.get_or_load(path, lambda p: p.read_text()) == "second"

    def test_missing_file_raises(self, tmp_path):
        """Test that a missing file propagates FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            DocumentCache().get_or_load(tmp_path / "nope.md", lambda p: p.read_text())


# ============================================================================
# Invalidation and Stats Tests
# ============================================================================


class TestDocumentCacheInvalidation:
    """Test invalidation and statistics."""

    def test_invalidate_pattern(self):
        """Test pattern-based invalidation."""
        cache = DocumentCache(default_ttl=60)
        cache.store("data/regions.yaml", 1)
        cache.store("data/creatures.yaml", 2)
        cache.store("docs/magic.md", 3)
        assert cache.invalidate("data/") == 2
        assert cache.size == 1

    def test_invalidate_key(self):
        """Test exact-key invalidation."""
        cache = DocumentCache(default_ttl=60)
        cache.store("key", 1)
        assert cache.invalidate_key("key") is True
        assert cache.invalidate_key("key") is False

    def test_clear(self):
        cache = DocumentCache(default_ttl=60)
        cache.store("a", 1)
        cache.store("b", 2)
        cache.clear()
        assert cache.size == 0

    def test_stats(self):
        """Test hit and miss counting."""
        cache = DocumentCache(default_ttl=60)
        cache.store("key", 1)
        cache.get("key")
        cache.get("key")
        cache.get("missing")
        stats = cache.get_stats()
        assert isinstance(stats, CacheStats)
        assert stats.hit_count == 2
        assert stats.miss_count == 1
        assert stats.hit_rate == pytest.approx(2 / 3)
        assert stats.total_entries == 1
