"""
Listing Repository.

Data access layer for listing operations.

Expected table:

    listings (
        id TEXT PRIMARY KEY, user_id TEXT, type TEXT,
        title TEXT, description TEXT, address TEXT,
        images TEXT[], keywords TEXT[], price DOUBLE PRECISION,
        bedrooms INTEGER, bathrooms REAL, furnished BOOLEAN,
        lat DOUBLE PRECISION, lng DOUBLE PRECISION, radius_km REAL,
        embedding DOUBLE PRECISION[], closed BOOLEAN DEFAULT FALSE,
        created_at TIMESTAMPTZ, updated_at TIMESTAMPTZ
    )
"""

from asyncpg import Pool
from loguru import logger

from src.modules.listings.models import Listing, ListingType

listings_log = logger.bind(module="Listings")

_COLUMNS = """
    id, user_id, type, title, description, address, images, keywords,
    price, bedrooms, bathrooms, furnished, lat, lng, radius_km,
    embedding, closed, created_at, updated_at
"""


class ListingRepository:
    """Repository for listing database operations."""

    def __init__(self, pool: Pool):
        """
        Initialize repository with database connection pool.

        Args:
            pool: asyncpg connection pool
        """
        self._pool = pool

    async def list_all(self, listing_type: ListingType) -> list[Listing]:
        """
        Get all listings of a type, newest first.

        Closed listings are returned too; callers decide what to drop.

        Args:
            listing_type: "room" or "roommate"

        Returns:
            List of Listing objects
        """
        query = f"""
        SELECT {_COLUMNS}
        FROM listings
        WHERE type = $1
        ORDER BY created_at DESC
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(query, listing_type)

        listings = [Listing.from_row(row) for row in rows]
        listings_log.debug(f"Loaded {len(listings)} {listing_type} listings")
        return listings

    async def list_missing_embeddings(self, dimensions: int, limit: int = 50) -> list[Listing]:
        """
        Get open listings whose embedding is missing, wrongly sized or all zeros.

        Args:
            dimensions: Expected embedding length
            limit: Maximum rows to return

        Returns:
            List of Listing objects needing an embedding
        """
        query = f"""
        SELECT {_COLUMNS}
        FROM listings
        WHERE closed IS NOT TRUE
          AND (
              embedding IS NULL
              OR COALESCE(array_length(embedding, 1), 0) <> $1
              OR NOT (0 <> ANY(embedding))
          )
        ORDER BY created_at DESC
        LIMIT $2
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(query, dimensions, limit)
        return [Listing.from_row(row) for row in rows]

    async def update_embedding(self, listing_id: str, embedding: list[float]) -> bool:
        """
        Store a freshly computed embedding on a listing.

        Args:
            listing_id: Listing ID
            embedding: Embedding vector

        Returns:
            True if a row was updated
        """
        query = """
        UPDATE listings
        SET embedding = $2, updated_at = NOW()
        WHERE id = $1
        RETURNING id
        """
        async with self._pool.acquire() as conn:
            result = await conn.fetchrow(query, listing_id, embedding)
            return result is not None
