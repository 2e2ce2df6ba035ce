"""Image repository: opaque external image references attached to locations."""
import logging
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from models.image import Image

LOG = logging.getLogger(__name__)


def normalize_image_url(url: str | None) -> str | None:
    """Return the stripped URL if it is an absolute http(s) URL, else None (logged)."""
    if url is None or not url.strip():
        return None
    candidate = url.strip()
    try:
        parsed = httpx.URL(candidate)
    except httpx.InvalidURL:
        LOG.warning("Ignoring invalid image URL %r", candidate)
        return None
    if parsed.scheme not in ("http", "https") or not parsed.host:
        LOG.warning("Ignoring invalid image URL %r", candidate)
        return None
    return candidate


def add_image(session: Session, url: str) -> Image:
    """Stage an image record in the session (flushed, not committed)."""
    image = Image(url=url)
    session.add(image)
    session.flush()
    return image


def get_image(session: Session, image_id: str) -> Optional[Image]:
    """Return an image by id or None."""
    return session.get(Image, image_id)


def discard_image(session: Session, image_id: str | None) -> None:
    """Stage deletion of an image record if it exists (no commit)."""
    if image_id is None:
        return
    image = session.get(Image, image_id)
    if image is not None:
        session.delete(image)
