"""Pydantic schemas for location API."""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field, field_serializer

from catalog_core.geo_ranker import GeoPoint
from schemas.common import Coordinates, Name, NotNull, Tags, to_utc_iso


class LocationCreate(BaseModel):
    """Payload for creating a location. Any rating/reviews sent by the client are ignored."""

    name: Name
    coordinates: Coordinates
    address: str | None = None
    description: str | None = None
    tags: Tags = Field(default_factory=list)
    imageUrl: str | None = None

    @property
    def position(self) -> GeoPoint:
        return GeoPoint(lng=self.coordinates[0], lat=self.coordinates[1])


class LocationUpdate(BaseModel):
    """Payload for updating a location (all fields optional; coordinates replace both values)."""

    name: Annotated[Optional[Name], NotNull] = None
    coordinates: Annotated[Optional[Coordinates], NotNull] = None
    address: str | None = None
    description: str | None = None
    tags: Optional[Tags] = None
    imageUrl: str | None = None

    def to_changes(self) -> dict:
        """Only the fields the client actually sent, keyed for update_location."""
        sent = self.model_fields_set
        changes: dict = {}
        for key in ("name", "address", "description", "tags"):
            if key in sent:
                changes[key] = getattr(self, key)
        if "coordinates" in sent:
            changes["position"] = GeoPoint(lng=self.coordinates[0], lat=self.coordinates[1])
        if "imageUrl" in sent:
            changes["image_url"] = self.imageUrl
        return changes


class LocationResponse(BaseModel):
    """Location in API responses."""

    id: str
    name: str
    address: str | None = None
    description: str | None = None
    rating: float = 0.0
    tags: list[str] = Field(default_factory=list)
    numReviews: int = 0
    coordinates: list[float]
    createdOn: datetime
    imageId: str | None = None

    @field_serializer("createdOn")
    def _created_on(self, value: datetime) -> str:
        return to_utc_iso(value)
