"""
Shared pytest fixtures for all tests.
"""

import pytest

from src.modules.listings import Listing
from src.modules.search import SearchRequest


# ============================================================
# Listing Fixtures
# ============================================================


@pytest.fixture
def sample_room_row() -> dict:
    """Sample `listings` table row for a room."""
    return {
        "id": "room-1",
        "user_id": "owner-1",
        "type": "room",
        "title": "Quiet furnished room near campus",
        "description": "Clean, quiet private room in a shared flat. Great for a student.",
        "address": "12 College Ave, Berkeley",
        "images": ["https://img.example.com/room-1.jpg"],
        "keywords": ["Quiet", "furnished", " campus ", ""],
        "price": 1250.0,
        "bedrooms": 2,
        "bathrooms": 1.0,
        "furnished": True,
        "lat": 37.8715,
        "lng": -122.2730,
        "radius_km": None,
        "embedding": None,
        "closed": False,
        "created_at": None,
        "updated_at": None,
    }


@pytest.fixture
def sample_room(sample_room_row) -> Listing:
    """Sample room listing."""
    return Listing.from_row(sample_room_row)


@pytest.fixture
def sample_roommate() -> Listing:
    """Sample roommate-seeking listing."""
    return Listing(
        id="mate-1",
        user_id="seeker-1",
        type="roommate",
        title="Looking for a tidy roommate",
        description="Working professional, tidy and quiet, loves cooking.",
        keywords=["tidy", "quiet", "professional"],
    )


@pytest.fixture
def make_listing():
    """Factory for listings with sensible defaults."""

    def _make(listing_id: str, **overrides) -> Listing:
        data = {
            "id": listing_id,
            "user_id": f"owner-{listing_id}",
            "type": "room",
            "title": f"Room {listing_id}",
            "description": "A room for rent",
        }
        data.update(overrides)
        return Listing(**data)

    return _make


# ============================================================
# Search Fixtures
# ============================================================


@pytest.fixture
def room_search() -> SearchRequest:
    """Room search with no explicit filters."""
    return SearchRequest(
        userId="searcher-1",
        searchType="room",
        description="Quiet furnished room near campus for a student",
        keywords=["quiet", "furnished", "campus"],
    )


@pytest.fixture
def budget_search() -> SearchRequest:
    """Room search with an explicit budget of 1000-1500."""
    return SearchRequest.model_validate(
        {
            "userId": "searcher-1",
            "searchType": "room",
            "description": "Affordable room",
            "keywords": ["affordable"],
            "structuredFilters": {
                "budgetMin": 1000,
                "budgetMax": 1500,
                "_explicitFilters": {"budgetMin": True, "budgetMax": True},
            },
        }
    )
