"""Modules package - Domain modules with repository pattern."""

from src.modules.listings import (
    GeoPoint,
    Listing,
    ListingAttributes,
    ListingRepository,
    ListingType,
)
from src.modules.search import (
    ExplicitFilters,
    MatchResponse,
    MatchResult,
    RankingStrategy,
    SearchRequest,
    StructuredFilters,
)

__all__ = [
    # Listings
    "GeoPoint",
    "Listing",
    "ListingAttributes",
    "ListingRepository",
    "ListingType",
    # Search
    "ExplicitFilters",
    "MatchResponse",
    "MatchResult",
    "RankingStrategy",
    "SearchRequest",
    "StructuredFilters",
]
