"""
Structured (filter) scoring for listings.

Soft filters only: each explicitly set dimension yields a factor in
[0.2, 1.0] and the score is their mean. A bad dimension lowers a listing's
score but never removes it.
"""

import math
from dataclasses import dataclass, field

from loguru import logger

from src.matching.vector_math import geo_distance_km
from src.modules.listings.models import Listing, ListingType
from src.modules.search.models import StructuredFilters

scorer_log = logger.bind(module="Scorer")

NEUTRAL_SCORE = 1.0
NO_FILTERS_EXPLANATION = "No specific filters applied - ranked by semantic similarity"
NO_FILTERS_BASIC_EXPLANATION = "No specific filters applied - ranked by text"


@dataclass
class StructuredScore:
    """Result of scoring one listing against structured filters."""

    score: float
    factors: dict[str, float] = field(default_factory=dict)
    explanations: list[str] = field(default_factory=list)

    @property
    def explanation(self) -> str:
        """Explanations joined into one sentence list."""
        return ". ".join(self.explanations)


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else NEUTRAL_SCORE


def _money(value: float) -> str:
    return f"${value:,.0f}" if float(value).is_integer() else f"${value:,.2f}"


def budget_factor(price: float, budget_min: float, budget_max: float) -> tuple[float, str]:
    """
    Score a price against a budget range.

    Inside the range the factor falls from 1.0 at the midpoint to 0.7 at the
    edges; outside it is 0.3.
    """
    if price < budget_min or price > budget_max:
        return 0.3, f"Price {_money(price)} is outside your specified budget range"

    span = budget_max - budget_min
    if span <= 0:
        return 1.0, f"Price {_money(price)} fits your budget well"

    midpoint = (budget_min + budget_max) / 2
    deviation = abs(price - midpoint) / span
    return max(0.7, 1 - deviation), f"Price {_money(price)} fits your budget well"


def location_factor(distance_km: float, radius_km: float) -> tuple[float, str]:
    """Score a distance against the searcher's preferred radius."""
    if math.isinf(distance_km):
        return 0.2, "Location could not be compared with your preferred area"
    if distance_km > radius_km:
        return 0.2, f"Location is {distance_km:.1f}km away (outside your preferred area)"
    if distance_km < 2:
        return 1.0, f"Excellent location ({distance_km:.1f}km away)"
    if distance_km < 5:
        return 0.9, f"Great location ({distance_km:.1f}km away)"
    return 0.8, f"Good location ({distance_km:.1f}km away)"


def bedrooms_factor(actual: int | None, desired: int) -> tuple[float, str]:
    """Score a bedroom count: exact, off by one, or different."""
    if actual is None:
        return 0.5, "Bedroom count not listed"
    if actual == desired:
        return 1.0, f"Perfect bedroom count ({desired})"
    if abs(actual - desired) == 1:
        return 0.8, f"Close bedroom count ({actual} vs {desired} desired)"
    return 0.5, f"Different bedroom count ({actual} vs {desired} desired)"


def bathrooms_factor(actual: float | None, desired: float) -> tuple[float, str]:
    """Score a bathroom count: exact, within half a bath, or different."""
    if actual is None:
        return 0.6, "Bathroom count not listed"
    if actual == desired:
        return 1.0, f"Perfect bathroom count ({desired:g})"
    if abs(actual - desired) <= 0.5:
        return 0.8, "Close bathroom count"
    return 0.6, "Different bathroom count"


def furnished_factor(actual: bool | None, desired: bool) -> tuple[float, str]:
    """Furnished is a soft preference: a mismatch costs little."""
    if actual is not None and actual == desired:
        return 1.0, "Furnished preference matches perfectly"
    return 0.7, "Furnished preference differs from your preference"


class StructuredScorer:
    """Scores listings against the filter dimensions a searcher set."""

    def __init__(self, log=None):
        """
        Initialize scorer.

        Args:
            log: loguru logger for scoring events (defaults to module logger)
        """
        self._log = log or scorer_log

    def score(
        self,
        listing: Listing,
        filters: StructuredFilters,
        listing_type: ListingType,
    ) -> StructuredScore:
        """
        Score a listing against only the explicitly set filters.

        Args:
            listing: Candidate listing
            filters: Searcher filters with explicit flags
            listing_type: Type being searched; room attributes are only
                compared for "room"

        Returns:
            StructuredScore with mean of active factors (1.0 if none)
        """
        explicit = filters.explicit
        factors: dict[str, float] = {}
        explanations: list[str] = []
        is_room = listing_type == "room"

        if is_room and explicit.budget and listing.price is not None:
            factors["budget"], reason = budget_factor(
                listing.price, filters.budget_min, filters.budget_max
            )
            explanations.append(reason)

        if explicit.geo:
            distance = geo_distance_km(listing.structured.location, filters.location)
            factors["location"], reason = location_factor(distance, filters.location_radius_km)
            explanations.append(reason)

        if is_room:
            attrs = listing.structured
            if explicit.bedrooms:
                factors["bedrooms"], reason = bedrooms_factor(attrs.bedrooms, filters.bedrooms)
                explanations.append(reason)
            if explicit.bathrooms:
                factors["bathrooms"], reason = bathrooms_factor(attrs.bathrooms, filters.bathrooms)
                explanations.append(reason)
            if explicit.furnished:
                factors["furnished"], reason = furnished_factor(attrs.furnished, filters.furnished)
                explanations.append(reason)

        if not factors:
            explanations.append(NO_FILTERS_EXPLANATION)

        result = StructuredScore(
            score=_mean(list(factors.values())),
            factors=factors,
            explanations=explanations,
        )
        self._log.bind(
            listing_id=listing.id, factors=factors, score=round(result.score, 3)
        ).debug(f"Structured score for {listing.id}: {result.score:.3f}")
        return result

    def score_basic(
        self,
        listing: Listing,
        filters: StructuredFilters,
        listing_type: ListingType,
    ) -> StructuredScore:
        """
        Cheaper structured score blended into similarity rankings.

        Budget is in/out only and bedrooms is the only room attribute
        compared.
        """
        explicit = filters.explicit
        factors: dict[str, float] = {}
        explanations: list[str] = []

        if listing_type == "room" and explicit.budget and listing.price is not None:
            price = listing.price
            if price < filters.budget_min or price > filters.budget_max:
                factors["budget"] = 0.3
                explanations.append(f"Price {_money(price)} is outside your specified budget")
            else:
                factors["budget"] = 1.0
                explanations.append(f"Price {_money(price)} fits your budget")

        if listing_type == "room" and explicit.bedrooms:
            factors["bedrooms"], reason = bedrooms_factor(
                listing.structured.bedrooms, filters.bedrooms
            )
            explanations.append(reason)

        if not factors:
            explanations.append(NO_FILTERS_BASIC_EXPLANATION)

        return StructuredScore(
            score=_mean(list(factors.values())),
            factors=factors,
            explanations=explanations,
        )
