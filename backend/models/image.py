"""Image model: opaque reference to an externally hosted picture of a location."""
import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from models import Base, utcnow


class Image(Base):
    """image table: id, url, uploaded_at."""

    __tablename__ = "image"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False, default=utcnow)
