"""
Unit tests for src/matching/structured.py
"""

import math

import pytest

from src.matching.structured import (
    NO_FILTERS_BASIC_EXPLANATION,
    NO_FILTERS_EXPLANATION,
    StructuredScorer,
    bathrooms_factor,
    bedrooms_factor,
    budget_factor,
    furnished_factor,
    location_factor,
)
from src.modules.listings import GeoPoint, ListingAttributes
from src.modules.search import ExplicitFilters, StructuredFilters


@pytest.fixture
def scorer():
    """Create a StructuredScorer instance."""
    return StructuredScorer()


def explicit_filters(**flags) -> StructuredFilters:
    """Filters with the given explicit flags and default values."""
    return StructuredFilters(explicit=ExplicitFilters(**flags))


# ============================================================
# factor function tests
# ============================================================


class TestBudgetFactor:
    """Tests for budget_factor function."""

    def test_midpoint_is_maximal(self):
        """Price at the midpoint should get the full factor."""
        factor, _ = budget_factor(1250, 1000, 1500)
        assert factor == pytest.approx(1.0)

    def test_midpoint_beats_boundaries(self):
        """Midpoint should score strictly higher than either boundary."""
        mid, _ = budget_factor(1250, 1000, 1500)
        low, _ = budget_factor(1000, 1000, 1500)
        high, _ = budget_factor(1500, 1000, 1500)
        assert mid > low
        assert mid > high

    def test_boundary_floor(self):
        """Boundaries should score at least 0.7."""
        factor, _ = budget_factor(1000, 1000, 1500)
        assert factor == pytest.approx(0.7)

    def test_outside_range(self):
        """Price outside the range should score 0.3."""
        factor, reason = budget_factor(3000, 1000, 1500)
        assert factor == 0.3
        assert "outside" in reason
        assert "$3,000" in reason

    def test_zero_width_range(self):
        """A single-value budget matched exactly should score 1.0."""
        factor, _ = budget_factor(1200, 1200, 1200)
        assert factor == 1.0


class TestLocationFactor:
    """Tests for location_factor function."""

    @pytest.mark.parametrize(
        "distance, expected",
        [(0.5, 1.0), (1.99, 1.0), (3.0, 0.9), (4.99, 0.9), (7.0, 0.8), (10.0, 0.8), (10.1, 0.2)],
    )
    def test_distance_bands(self, distance, expected):
        """Distance should map to its band within a 10 km radius."""
        factor, _ = location_factor(distance, 10)
        assert factor == expected

    def test_unknown_distance(self):
        """An infinite distance should score 0.2."""
        factor, reason = location_factor(math.inf, 10)
        assert factor == 0.2
        assert "could not be compared" in reason


class TestAttributeFactors:
    """Tests for bedrooms, bathrooms and furnished factors."""

    def test_bedrooms(self):
        """Bedrooms: exact 1.0, off by one 0.8, otherwise 0.5."""
        assert bedrooms_factor(2, 2)[0] == 1.0
        assert bedrooms_factor(3, 2)[0] == 0.8
        assert bedrooms_factor(5, 2)[0] == 0.5
        assert bedrooms_factor(None, 2)[0] == 0.5

    def test_bathrooms(self):
        """Bathrooms: exact 1.0, within half 0.8, otherwise 0.6."""
        assert bathrooms_factor(1.5, 1.5)[0] == 1.0
        assert bathrooms_factor(2.0, 1.5)[0] == 0.8
        assert bathrooms_factor(3.0, 1.0)[0] == 0.6
        assert bathrooms_factor(None, 1.0)[0] == 0.6

    def test_furnished(self):
        """Furnished: match 1.0, mismatch or unknown 0.7."""
        assert furnished_factor(True, True)[0] == 1.0
        assert furnished_factor(False, False)[0] == 1.0
        assert furnished_factor(False, True)[0] == 0.7
        assert furnished_factor(None, True)[0] == 0.7


# ============================================================
# StructuredScorer.score tests
# ============================================================


class TestStructuredScorer:
    """Tests for StructuredScorer.score method."""

    def test_no_explicit_filters_is_neutral(self, scorer, make_listing):
        """With no explicit flags, any listing should score 1.0."""
        filters = StructuredFilters(budget_min=0, budget_max=10, bedrooms=9)
        listing = make_listing("a", price=99999, structured=ListingAttributes(bedrooms=1))
        result = scorer.score(listing, filters, "room")
        assert result.score == 1.0
        assert result.factors == {}
        assert result.explanation == NO_FILTERS_EXPLANATION

    def test_budget_scenario(self, scorer, make_listing, budget_search):
        """In-budget midpoint room should score ~1.0, out-of-budget 0.3."""
        inside = scorer.score(make_listing("in", price=1250), budget_search.filters, "room")
        outside = scorer.score(make_listing("out", price=3000), budget_search.filters, "room")
        assert inside.factors["budget"] == pytest.approx(1.0)
        assert outside.factors["budget"] == 0.3

    def test_budget_ignored_without_price(self, scorer, make_listing, budget_search):
        """A room with no price should not be budget-scored."""
        result = scorer.score(make_listing("a"), budget_search.filters, "room")
        assert "budget" not in result.factors
        assert result.score == 1.0

    def test_budget_ignored_for_roommates(self, scorer, make_listing, budget_search):
        """Budget only applies to room searches."""
        listing = make_listing("a", type="roommate", price=3000)
        result = scorer.score(listing, budget_search.filters, "roommate")
        assert result.factors == {}

    def test_mean_of_factors(self, scorer, make_listing):
        """Score should be the mean of the active factors."""
        filters = StructuredFilters(
            budget_min=1000, budget_max=1500, bedrooms=2, furnished=True,
            explicit=ExplicitFilters(budget_max=True, bedrooms=True, furnished=True),
        )
        listing = make_listing(
            "a", price=3000, structured=ListingAttributes(bedrooms=3, furnished=True)
        )
        result = scorer.score(listing, filters, "room")
        assert result.factors == {"budget": 0.3, "bedrooms": 0.8, "furnished": 1.0}
        assert result.score == pytest.approx((0.3 + 0.8 + 1.0) / 3)

    def test_location_missing_on_listing(self, scorer, make_listing):
        """A listing without coordinates should get the worst location factor."""
        filters = StructuredFilters(
            location=GeoPoint(lat=37.87, lng=-122.27),
            explicit=ExplicitFilters(location=True),
        )
        result = scorer.score(make_listing("a"), filters, "room")
        assert result.factors["location"] == 0.2

    def test_location_applies_to_roommates(self, scorer, make_listing):
        """Location is compared for roommate searches too."""
        point = GeoPoint(lat=37.87, lng=-122.27)
        filters = StructuredFilters(location=point, explicit=ExplicitFilters(location=True))
        listing = make_listing(
            "a", type="roommate", structured=ListingAttributes(location=point)
        )
        result = scorer.score(listing, filters, "roommate")
        assert result.factors == {"location": 1.0}

    def test_emits_scoring_event(self, make_listing):
        """Scorer should bind listing id and factors on its logger."""
        events = []

        class RecordingLog:
            def bind(self, **kwargs):
                events.append(kwargs)
                return self

            def debug(self, message):
                events.append(message)

        StructuredScorer(log=RecordingLog()).score(make_listing("a"), StructuredFilters(), "room")
        assert events[0]["listing_id"] == "a"
        assert events[0]["factors"] == {}


# ============================================================
# StructuredScorer.score_basic tests
# ============================================================


class TestScoreBasic:
    """Tests for StructuredScorer.score_basic method."""

    def test_no_filters(self, scorer, make_listing):
        """Without explicit flags the basic score is neutral."""
        result = scorer.score_basic(make_listing("a", price=50), StructuredFilters(), "room")
        assert result.score == 1.0
        assert result.explanation == NO_FILTERS_BASIC_EXPLANATION

    def test_budget_is_binary(self, scorer, make_listing, budget_search):
        """Basic budget check is in/out only."""
        edge = scorer.score_basic(make_listing("a", price=1000), budget_search.filters, "room")
        out = scorer.score_basic(make_listing("b", price=1600), budget_search.filters, "room")
        assert edge.factors["budget"] == 1.0
        assert out.factors["budget"] == 0.3
