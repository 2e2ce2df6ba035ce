"""Location model: a geotagged point of interest owning its reviews."""
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from catalog_core.geo_ranker import GeoPoint
from models import Base, utcnow


class Location(Base):
    """location table: id, name, address, description, tags, lng/lat, rating, created_on, image_id, version."""

    __tablename__ = "location"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(String(512), nullable=True)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    tags: Mapped[list] = mapped_column(JSON(), nullable=False, default=list)
    lng: Mapped[float] = mapped_column(Float(), nullable=False)
    lat: Mapped[float] = mapped_column(Float(), nullable=False)
    # Mean of review ratings; written only by the review mutation path.
    rating: Mapped[float] = mapped_column(Float(), nullable=False, default=0.0)
    created_on: Mapped[datetime] = mapped_column(DateTime(), nullable=False, default=utcnow, index=True)
    image_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("image.id", ondelete="SET NULL"),
        nullable=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="location",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Review.created_on",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def position(self) -> GeoPoint:
        return GeoPoint(lng=self.lng, lat=self.lat)

    @property
    def coordinates(self) -> list[float]:
        return [self.lng, self.lat]

    @property
    def num_reviews(self) -> int:
        return len(self.reviews)
