"""Review model: one user review, owned by exactly one location."""
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog_core.geo_ranker import GeoPoint
from models import Base, utcnow


class Review(Base):
    """review table: id, location_id, author, rating, review_text, created_on, lng/lat."""

    __tablename__ = "review"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    location_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("location.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    rating: Mapped[float] = mapped_column(Float(), nullable=False)
    review_text: Mapped[str] = mapped_column(String(1000), nullable=False)
    created_on: Mapped[datetime] = mapped_column(DateTime(), nullable=False, default=utcnow)
    # Where the reviewer was; independent of the location's own position.
    lng: Mapped[float | None] = mapped_column(Float(), nullable=True)
    lat: Mapped[float | None] = mapped_column(Float(), nullable=True)

    location: Mapped["Location"] = relationship("Location", back_populates="reviews")

    @property
    def position(self) -> GeoPoint | None:
        if self.lng is None or self.lat is None:
            return None
        return GeoPoint(lng=self.lng, lat=self.lat)

    @property
    def coordinates(self) -> list[float] | None:
        if self.lng is None or self.lat is None:
            return None
        return [self.lng, self.lat]
