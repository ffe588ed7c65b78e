"""
Listing Models.

Pydantic models for room and roommate listings.
"""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ListingType = Literal["room", "roommate"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GeoPoint(BaseModel):
    """A latitude/longitude pair."""

    lat: float
    lng: float


class ListingAttributes(BaseModel):
    """Structural attributes of a room listing (ignored for roommate posts)."""

    bedrooms: int | None = None
    bathrooms: float | None = None
    furnished: bool | None = None
    location: GeoPoint | None = None
    location_radius_km: float | None = Field(default=None, alias="locationRadiusKm")

    model_config = ConfigDict(populate_by_name=True)


class Listing(BaseModel):
    """A posted room or roommate-seeking ad."""

    model_config = ConfigDict(populate_by_name=True)

    # Identity
    id: str
    user_id: str = Field(alias="userId")
    type: ListingType

    # Content
    title: str = ""
    description: str = ""
    address: str = ""
    images: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)

    # Room-only economics
    price: float | None = None
    structured: ListingAttributes = Field(default_factory=ListingAttributes)

    # Lifecycle
    closed: bool = False

    # Derived
    embedding: list[float] = Field(default_factory=list, exclude=True)

    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    @field_validator("keywords", mode="before")
    @classmethod
    def normalize_keywords(cls, v: Any) -> list[str]:
        """Lowercase and strip keywords, dropping blanks."""
        if not v:
            return []
        return [str(k).strip().lower() for k in v if str(k).strip()]

    @field_validator("title", "description", "address", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        """Store NULL text columns as empty strings."""
        return v or ""

    @field_validator("images", "embedding", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> list:
        """Store NULL array columns as empty lists."""
        return list(v) if v else []

    def embedding_text(self) -> str:
        """Text that represents the listing semantically."""
        return f"{self.title}\n{self.description}\n{self.address}".strip()

    def has_usable_embedding(self, dimensions: int) -> bool:
        """
        Check whether the stored embedding can be reused.

        Missing, wrongly sized, or all-zero embeddings are stale and must
        be regenerated.
        """
        if len(self.embedding) != dimensions:
            return False
        return any(v != 0 for v in self.embedding)

    @classmethod
    def from_row(cls, row: Any) -> "Listing":
        """
        Build a listing from a flat `listings` table row.

        Args:
            row: asyncpg Record or dict

        Returns:
            Listing instance
        """
        data = dict(row)
        location = None
        if data.get("lat") is not None and data.get("lng") is not None:
            location = GeoPoint(lat=data["lat"], lng=data["lng"])

        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            type=data["type"],
            title=data.get("title"),
            description=data.get("description"),
            address=data.get("address"),
            images=data.get("images"),
            keywords=data.get("keywords"),
            price=data.get("price"),
            structured=ListingAttributes(
                bedrooms=data.get("bedrooms"),
                bathrooms=data.get("bathrooms"),
                furnished=data.get("furnished"),
                location=location,
                location_radius_km=data.get("radius_km"),
            ),
            closed=bool(data.get("closed")),
            embedding=data.get("embedding"),
            created_at=data.get("created_at") or _utcnow(),
            updated_at=data.get("updated_at") or _utcnow(),
        )

    def __str__(self) -> str:
        """String representation for console output."""
        price = f"${self.price:g}" if self.price is not None else "N/A"
        return f"[{self.id}] ({self.type}) {self.title or self.description[:40]} | {price}"
