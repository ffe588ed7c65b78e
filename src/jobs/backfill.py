"""
Embedding Backfill Module.

Computes embeddings for open listings that have none (or a degraded one)
and writes them back to the listing store.
"""

from typing import Protocol

from loguru import logger

from src.matching.embedding_cache import EmbeddingCache
from src.matching.vector_math import is_zero_vector
from src.modules.listings import Listing

backfill_log = logger.bind(module="Backfill")


class BackfillStore(Protocol):
    """Listing store operations used by the backfill (ListingRepository implements it)."""

    async def list_missing_embeddings(self, dimensions: int, limit: int = 50) -> list[Listing]: ...

    async def update_embedding(self, listing_id: str, embedding: list[float]) -> bool: ...


class EmbeddingBackfill:
    """
    Fills in missing listing embeddings.

    Workflow:
    1. Load a batch of open listings whose embedding is missing, wrongly sized or all zeros
    2. Embed each listing's text through the cache
    3. Write back every real (non-zero) vector
    """

    def __init__(self, store: BackfillStore, cache: EmbeddingCache):
        """
        Initialize backfill.

        Args:
            store: Listing store
            cache: Embedding cache (zero vectors mean the provider failed)
        """
        self._store = store
        self._cache = cache

    async def run(self, batch_size: int = 50) -> dict:
        """
        Backfill one batch.

        Args:
            batch_size: Maximum listings to process

        Returns:
            Dict with counts: {"checked": int, "updated": int, "failed": int}
        """
        result = {"checked": 0, "updated": 0, "failed": 0}

        if not self._cache.available:
            backfill_log.warning("Embedding provider not configured, skipping backfill")
            return result

        listings = await self._store.list_missing_embeddings(self._cache.dimensions, batch_size)
        result["checked"] = len(listings)

        for listing in listings:
            text = listing.embedding_text()
            if not text:
                backfill_log.debug(f"Listing {listing.id} has no text to embed")
                result["failed"] += 1
                continue

            embedding = await self._cache.get_embedding(text)
            if is_zero_vector(embedding):
                result["failed"] += 1
                continue

            try:
                if await self._store.update_embedding(listing.id, embedding):
                    result["updated"] += 1
                else:
                    result["failed"] += 1
            except Exception as e:
                backfill_log.error(f"Failed to store embedding for {listing.id}: {e}")
                result["failed"] += 1

        backfill_log.info(
            f"Backfill: {result['checked']} checked, "
            f"{result['updated']} updated, {result['failed']} failed"
        )
        return result
