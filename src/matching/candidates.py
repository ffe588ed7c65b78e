"""
Candidate pool for matching.

Loads every listing of the requested type and drops the ones a searcher
must never see.
"""

from typing import Protocol

from loguru import logger

from src.matching.exceptions import CandidateStoreError
from src.modules.listings.models import Listing, ListingType

candidates_log = logger.bind(module="Candidates")


class ListingStore(Protocol):
    """Read access to listings (ListingRepository implements it)."""

    async def list_all(self, listing_type: ListingType) -> list[Listing]: ...


def is_candidate(listing: Listing, listing_type: ListingType, exclude_user_id: str) -> bool:
    """Check if a listing may appear in a searcher's results."""
    if listing.closed:
        return False
    if listing.type != listing_type:
        return False
    return listing.user_id != exclude_user_id


class CandidatePool:
    """Fetches the candidate listings for a search."""

    def __init__(self, store: ListingStore):
        """
        Initialize pool.

        Args:
            store: Listing store
        """
        self._store = store

    async def fetch(self, listing_type: ListingType, exclude_user_id: str) -> list[Listing]:
        """
        Get open listings of a type not owned by the searcher.

        Args:
            listing_type: "room" or "roommate"
            exclude_user_id: Searcher's user ID

        Returns:
            Candidate listings in store order

        Raises:
            CandidateStoreError: If the store cannot be read
        """
        try:
            listings = await self._store.list_all(listing_type)
        except Exception as e:
            candidates_log.error(f"Listing store unavailable: {e}")
            raise CandidateStoreError(f"Could not load {listing_type} listings") from e

        candidates = [
            listing
            for listing in listings
            if is_candidate(listing, listing_type, exclude_user_id)
        ]
        candidates_log.info(
            f"Loaded {len(listings)} {listing_type} listings, "
            f"{len(candidates)} candidates, {len(listings) - len(candidates)} skipped"
        )
        return candidates
