"""Location repository: get, create, update, delete, and the SQL record source for search."""
from typing import Any, Iterable, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, selectinload

from catalog_core.geo_ranker import GeoPoint
from catalog_core.query_planner import RecordFilter
from catalog_core.sources import Ordering
from models.image import Image  # noqa: F401 - register with Base
from models.location import Location
from models.review import Review  # noqa: F401
from repositories.image_repository import add_image, discard_image, normalize_image_url

_SORT_COLUMNS = {
    "name": func.lower(Location.name),
    "rating": Location.rating,
    "date": Location.created_on,
}


def _apply_filter(stmt: Select, record_filter: RecordFilter) -> Select:
    if record_filter.name_contains is not None:
        stmt = stmt.where(
            func.lower(Location.name).contains(record_filter.name_contains.lower(), autoescape=True)
        )
    if record_filter.created_since is not None:
        stmt = stmt.where(Location.created_on >= record_filter.created_since)
    return stmt


class SqlLocationSource:
    """RecordSource over the location table; ordering and window run in SQL."""

    def __init__(self, session: Session):
        self._session = session

    def find_matching(
        self,
        record_filter: RecordFilter,
        ordering: Ordering | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Location]:
        stmt = _apply_filter(select(Location), record_filter).options(selectinload(Location.reviews))
        if ordering is None:
            stmt = stmt.order_by(Location.created_on, Location.id)
        else:
            column = _SORT_COLUMNS[ordering.field]
            stmt = stmt.order_by(column.desc() if ordering.descending else column.asc(), Location.id)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self._session.execute(stmt).scalars().all())

    def count(self, record_filter: RecordFilter) -> int:
        stmt = _apply_filter(select(func.count()).select_from(Location), record_filter)
        return self._session.execute(stmt).scalar() or 0


def get_location(session: Session, location_id: str) -> Optional[Location]:
    """Return a location by id or None."""
    return session.get(Location, location_id)


def count_locations(session: Session) -> int:
    """Return the number of locations (for seeding)."""
    return SqlLocationSource(session).count(RecordFilter())


def _clean_tags(tags: Iterable[str] | None) -> list[str]:
    return [t for t in (tags or []) if t is not None]


def create_location(
    session: Session,
    *,
    name: str,
    position: GeoPoint,
    address: str | None = None,
    description: str | None = None,
    tags: Iterable[str] | None = None,
    image_url: str | None = None,
    location_id: str | None = None,
) -> Location:
    """
    Create a location, commit, and return it.

    Every location starts with no reviews and a rating of 0; there is no way to
    seed either from here. An invalid image_url is skipped, not fatal.
    """
    url = normalize_image_url(image_url)
    image_id = add_image(session, url).id if url else None
    loc = Location(
        name=name,
        address=address,
        description=description,
        tags=_clean_tags(tags),
        lng=position.lng,
        lat=position.lat,
        rating=0.0,
        image_id=image_id,
    )
    if location_id:
        loc.id = location_id
    session.add(loc)
    session.commit()
    session.refresh(loc)
    return loc


def update_location(session: Session, location: Location, changes: dict[str, Any]) -> Location:
    """
    Apply a partial update and commit. Recognized keys: name, address, description,
    tags, position (GeoPoint, replaces both coordinates), image_url.
    Rating and reviews are never touched here.
    """
    for key in ("name", "address", "description"):
        if key in changes:
            setattr(location, key, changes[key])
    if "tags" in changes:
        location.tags = _clean_tags(changes["tags"])
    if changes.get("position") is not None:
        location.lng = changes["position"].lng
        location.lat = changes["position"].lat
    if "image_url" in changes:
        url = normalize_image_url(changes["image_url"])
        if url:
            old_image_id = location.image_id
            location.image_id = add_image(session, url).id
            discard_image(session, old_image_id)
    session.commit()
    session.refresh(location)
    return location


def delete_location(session: Session, location_id: str) -> bool:
    """Delete a location, its reviews and its image. Returns False if not found."""
    loc = get_location(session, location_id)
    if loc is None:
        return False
    image_id = loc.image_id
    session.delete(loc)
    session.flush()
    discard_image(session, image_id)
    session.commit()
    return True
