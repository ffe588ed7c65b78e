"""
Search Models.

Pydantic models for match requests and results.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.modules.listings.models import GeoPoint, Listing, ListingType


class RankingStrategy(str, Enum):
    """Which pipeline stage produced the final ordering."""

    AI = "ai"
    STRUCTURED = "structured"
    EMBEDDING = "embedding"
    KEYWORD = "keyword"


class ExplicitFilters(BaseModel):
    """
    Which filter dimensions the searcher actually set.

    A flag is authoritative: values in StructuredFilters are never used to
    guess whether a dimension is active.
    """

    model_config = ConfigDict(populate_by_name=True)

    budget_min: bool = Field(default=False, alias="budgetMin")
    budget_max: bool = Field(default=False, alias="budgetMax")
    location: bool = False
    location_radius_km: bool = Field(default=False, alias="locationRadiusKm")
    bedrooms: bool = False
    bathrooms: bool = False
    furnished: bool = False

    @property
    def budget(self) -> bool:
        """Budget is active when either bound was set."""
        return self.budget_min or self.budget_max

    @property
    def geo(self) -> bool:
        """Location is active when the point or the radius was set."""
        return self.location or self.location_radius_km

    def active_names(self) -> list[str]:
        """Names of the flags that are set."""
        return [name for name, value in self if value]

    @property
    def any_set(self) -> bool:
        """True if any dimension is active."""
        return bool(self.active_names())


class StructuredFilters(BaseModel):
    """Structured preferences for a search, paired with explicit flags."""

    model_config = ConfigDict(populate_by_name=True)

    budget_min: float = Field(default=0, alias="budgetMin")
    budget_max: float = Field(default=5000, alias="budgetMax")
    location: GeoPoint | None = None
    location_radius_km: float = Field(default=10, alias="locationRadiusKm")
    bedrooms: int = 1
    bathrooms: float = 1
    furnished: bool = False
    explicit: ExplicitFilters = Field(default_factory=ExplicitFilters, alias="_explicitFilters")


class SearchRequest(BaseModel):
    """An ephemeral match request."""

    model_config = ConfigDict(populate_by_name=True)

    searcher_id: str = Field(..., min_length=1, alias="userId")
    listing_type: ListingType = Field(..., alias="searchType")
    description: str = Field(..., min_length=1)
    keywords: list[str] | None = None
    filters: StructuredFilters = Field(default_factory=StructuredFilters, alias="structuredFilters")
    top_n: int = Field(default=5, ge=1, le=50, alias="topN")

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        """Trim the free text and reject blank descriptions."""
        v = v.strip()
        if not v:
            raise ValueError("description must not be blank")
        return v


class MatchResult(BaseModel):
    """A scored projection of a listing."""

    listing: Listing
    structured_score: float = Field(default=0.0, ge=0, le=1, alias="structuredScore")
    semantic_score: float = Field(default=0.0, ge=0, le=1, alias="semanticScore")
    combined_score: float = Field(default=0.0, ge=0, le=1, alias="combinedScore")
    explanation: str = ""
    factors: dict[str, float] = Field(default_factory=dict)
    ranked_by: RankingStrategy = Field(default=RankingStrategy.STRUCTURED, alias="rankedBy")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("structured_score", "semantic_score", "combined_score", mode="before")
    @classmethod
    def clamp_score(cls, v: float) -> float:
        """Clamp into [0, 1] and round to 3 decimals."""
        v = float(v)
        return round(min(1.0, max(0.0, v)), 3)

    @property
    def id(self) -> str:
        """ID of the underlying listing."""
        return self.listing.id


class MatchResponse(BaseModel):
    """Response body for a match search."""

    matches: list[MatchResult] = Field(default_factory=list)
    strategy: RankingStrategy | None = None
    message: str | None = None
