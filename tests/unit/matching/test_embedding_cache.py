"""
Unit tests for src/matching/embedding_cache.py
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from src.matching.embedding_cache import EmbeddingCache, cache_key
from tests.fixtures.matching import FakeEmbeddingStore

# Import fixtures
pytest_plugins = ["tests.fixtures.matching"]

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_cache(provider, store, **kwargs) -> EmbeddingCache:
    """Cache with a fixed clock and no backoff delay."""
    kwargs.setdefault("dimensions", 3)
    kwargs.setdefault("base_delay", 0)
    kwargs.setdefault("clock", lambda: NOW)
    return EmbeddingCache(provider=provider, store=store, **kwargs)


# ============================================================
# cache_key tests
# ============================================================


class TestCacheKey:
    """Tests for cache_key function."""

    def test_deterministic(self):
        """Same text should always map to the same key."""
        assert cache_key("quiet room") == cache_key("quiet room")

    def test_trimmed_before_hashing(self):
        """Surrounding whitespace should not change the key."""
        assert cache_key("  quiet room\n") == cache_key("quiet room")

    def test_prefix(self):
        """Keys should be namespaced."""
        assert cache_key("x").startswith("embedding:")

    def test_different_text(self):
        """Different text should map to different keys."""
        assert cache_key("quiet room") != cache_key("loud room")


# ============================================================
# EmbeddingCache tests
# ============================================================


class TestEmbeddingCache:
    """Tests for EmbeddingCache.get_embedding method."""

    @pytest.mark.asyncio
    async def test_second_call_hits_cache(self, embedding_provider, embedding_store):
        """Two calls with the same text should call the provider once."""
        cache = make_cache(embedding_provider, embedding_store)

        first = await cache.get_embedding("quiet room near campus")
        second = await cache.get_embedding("quiet room near campus")

        assert first == [0.1, 0.2, 0.3]
        assert second == first
        embedding_provider.embed.assert_awaited_once_with("quiet room near campus")

    @pytest.mark.asyncio
    async def test_entry_written_with_ttl(self, embedding_provider, embedding_store):
        """A miss should store the vector with its timestamp and a 7-day TTL."""
        cache = make_cache(embedding_provider, embedding_store)
        await cache.get_embedding("quiet room")

        key = cache_key("quiet room")
        assert embedding_store.entries[key] == {
            "embedding": [0.1, 0.2, 0.3],
            "updated_at": NOW.isoformat(),
        }
        assert embedding_store.ttls[key] == 7 * 24 * 3600

    @pytest.mark.asyncio
    async def test_fresh_entry_used(self, embedding_provider):
        """An entry younger than the TTL should be returned as-is."""
        store = FakeEmbeddingStore(
            {
                cache_key("quiet room"): {
                    "embedding": [9.0, 9.0, 9.0],
                    "updated_at": (NOW - timedelta(days=6)).isoformat(),
                }
            }
        )
        cache = make_cache(embedding_provider, store)

        assert await cache.get_embedding("quiet room") == [9.0, 9.0, 9.0]
        embedding_provider.embed.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stale_entry_recomputed(self, embedding_provider):
        """An entry 7 days old or more should be recomputed."""
        store = FakeEmbeddingStore(
            {
                cache_key("quiet room"): {
                    "embedding": [9.0, 9.0, 9.0],
                    "updated_at": (NOW - timedelta(days=7)).isoformat(),
                }
            }
        )
        cache = make_cache(embedding_provider, store)

        assert await cache.get_embedding("quiet room") == [0.1, 0.2, 0.3]
        embedding_provider.embed.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_naive_timestamp_treated_as_utc(self, embedding_provider):
        """Timestamps without a timezone should be read as UTC."""
        store = FakeEmbeddingStore(
            {
                cache_key("quiet room"): {
                    "embedding": [9.0, 9.0, 9.0],
                    "updated_at": "2024-05-01T00:00:00",
                }
            }
        )
        cache = make_cache(embedding_provider, store)

        assert await cache.get_embedding("quiet room") == [9.0, 9.0, 9.0]

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self, embedding_store):
        """Transient failures should be retried."""
        provider = AsyncMock()
        provider.embed.side_effect = [TimeoutError("slow"), [0.5, 0.5, 0.5]]
        cache = make_cache(provider, embedding_store)

        assert await cache.get_embedding("quiet room") == [0.5, 0.5, 0.5]
        assert provider.embed.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_returns_zero_vector(self, embedding_store):
        """Three failures should return a zero vector of the configured size."""
        provider = AsyncMock()
        provider.embed.side_effect = RuntimeError("provider down")
        cache = make_cache(provider, embedding_store, base_delay=0.5)

        with patch("src.matching.embedding_cache.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await cache.get_embedding("quiet room")

        assert result == [0.0, 0.0, 0.0]
        assert provider.embed.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]
        assert embedding_store.entries == {}

    @pytest.mark.asyncio
    async def test_no_provider(self, embedding_store):
        """Without a provider the cache should return a zero vector."""
        cache = make_cache(None, embedding_store, dimensions=1536)

        assert cache.available is False
        result = await cache.get_embedding("quiet room")
        assert len(result) == 1536
        assert not any(result)

    @pytest.mark.asyncio
    async def test_unreadable_store_is_a_miss(self, embedding_provider):
        """Read failures should fall through to the provider."""
        cache = make_cache(embedding_provider, FakeEmbeddingStore(fail_reads=True))
        assert await cache.get_embedding("quiet room") == [0.1, 0.2, 0.3]

    @pytest.mark.asyncio
    async def test_write_failure_absorbed(self, embedding_provider):
        """Write failures should not fail the lookup."""
        cache = make_cache(embedding_provider, FakeEmbeddingStore(fail_writes=True))
        assert await cache.get_embedding("quiet room") == [0.1, 0.2, 0.3]
