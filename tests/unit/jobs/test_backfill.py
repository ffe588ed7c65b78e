"""
Unit tests for src/jobs/backfill.py
"""

from unittest.mock import AsyncMock

import pytest

from src.jobs.backfill import EmbeddingBackfill
from src.matching.embedding_cache import EmbeddingCache
from tests.fixtures.matching import FakeEmbeddingStore, FakeListingStore

# Import fixtures
pytest_plugins = ["tests.fixtures.matching"]


def make_cache(provider) -> EmbeddingCache:
    """3-dim cache with no backoff delay."""
    return EmbeddingCache(provider=provider, store=FakeEmbeddingStore(), dimensions=3, base_delay=0)


class TestEmbeddingBackfill:
    """Tests for EmbeddingBackfill.run method."""

    @pytest.mark.asyncio
    async def test_fills_missing_embeddings(self, make_listing, embedding_provider):
        """Listings without a usable embedding should get one."""
        listings = [
            make_listing("missing"),
            make_listing("zeros", embedding=[0.0, 0.0, 0.0]),
            make_listing("ok", embedding=[1.0, 1.0, 1.0]),
            make_listing("closed", closed=True),
        ]
        store = FakeListingStore(listings)

        result = await EmbeddingBackfill(store, make_cache(embedding_provider)).run()

        assert result == {"checked": 2, "updated": 2, "failed": 0}
        assert listings[0].embedding == [0.1, 0.2, 0.3]
        assert listings[1].embedding == [0.1, 0.2, 0.3]
        assert listings[2].embedding == [1.0, 1.0, 1.0]
        assert listings[3].embedding == []

    @pytest.mark.asyncio
    async def test_zero_vectors_not_written(self, make_listing):
        """A failed embedding should be counted, not stored."""
        provider = AsyncMock()
        provider.embed.side_effect = RuntimeError("provider down")
        listings = [make_listing("a")]

        result = await EmbeddingBackfill(FakeListingStore(listings), make_cache(provider)).run()

        assert result == {"checked": 1, "updated": 0, "failed": 1}
        assert listings[0].embedding == []

    @pytest.mark.asyncio
    async def test_empty_text_skipped(self, make_listing, embedding_provider):
        """Listings with no text should not be embedded."""
        listings = [make_listing("a", title="", description="")]

        result = await EmbeddingBackfill(FakeListingStore(listings), make_cache(embedding_provider)).run()

        assert result["failed"] == 1
        embedding_provider.embed.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_batch_size(self, make_listing, embedding_provider):
        """No more than batch_size listings should be processed."""
        listings = [make_listing(str(i), title=f"Room {i}") for i in range(5)]

        result = await EmbeddingBackfill(FakeListingStore(listings), make_cache(embedding_provider)).run(2)

        assert result["checked"] == 2

    @pytest.mark.asyncio
    async def test_no_provider(self, make_listing):
        """Without a provider nothing should be loaded."""
        store = FakeListingStore([make_listing("a")])
        cache = EmbeddingCache(provider=None, store=FakeEmbeddingStore(), dimensions=3)

        result = await EmbeddingBackfill(store, cache).run()

        assert result == {"checked": 0, "updated": 0, "failed": 0}
