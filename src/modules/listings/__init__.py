"""Listings module."""

from src.modules.listings.models import (
    GeoPoint,
    Listing,
    ListingAttributes,
    ListingType,
)
from src.modules.listings.repository import ListingRepository

__all__ = [
    "GeoPoint",
    "Listing",
    "ListingAttributes",
    "ListingType",
    "ListingRepository",
]
