"""Pydantic schemas for review API."""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field, field_serializer

from catalog_core.geo_ranker import GeoPoint
from schemas.common import Coordinates, Name, NotNull, Rating, to_utc_iso

MAX_REVIEW_TEXT = 1000


def _non_blank_text(value: str) -> str:
    if not value.strip():
        raise ValueError("reviewText must not be empty")
    return value


ReviewText = Annotated[str, Field(min_length=1, max_length=MAX_REVIEW_TEXT), AfterValidator(_non_blank_text)]


class ReviewCreate(BaseModel):
    """Payload for creating a review. Rating must be a JSON number in [0, 5]."""

    author: Name
    rating: Rating
    reviewText: ReviewText
    coordinates: Coordinates

    @property
    def position(self) -> GeoPoint:
        return GeoPoint(lng=self.coordinates[0], lat=self.coordinates[1])


class ReviewUpdate(BaseModel):
    """Payload for updating a review: any subset of the create fields, none of them null."""

    author: Annotated[Optional[Name], NotNull] = None
    rating: Annotated[Optional[Rating], NotNull] = None
    reviewText: Annotated[Optional[ReviewText], NotNull] = None
    coordinates: Annotated[Optional[Coordinates], NotNull] = None

    def to_changes(self) -> dict:
        """Only the fields the client actually sent, keyed for update_review."""
        sent = self.model_fields_set
        changes: dict = {}
        if "author" in sent:
            changes["author"] = self.author
        if "rating" in sent:
            changes["rating"] = self.rating
        if "reviewText" in sent:
            changes["review_text"] = self.reviewText
        if "coordinates" in sent:
            changes["position"] = GeoPoint(lng=self.coordinates[0], lat=self.coordinates[1])
        return changes


class ReviewResponse(BaseModel):
    """Review in API responses."""

    id: str
    author: str
    reviewText: str
    rating: float
    createdOn: datetime
    coordinates: list[float] | None = None

    @field_serializer("createdOn")
    def _created_on(self, value: datetime) -> str:
        return to_utc_iso(value)
