"""Validate raw list parameters and normalize them into a QuerySpec.

The planner never touches storage: it only turns transport-level strings into
an immutable QuerySpec that the search executor runs against a record
source.
"""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone

from catalog_core.geo_ranker import GeoPoint, is_valid_position

LOCATION_SEARCH_FIELDS = ("name", "date", "coordinates")
LOCATION_SORT_FIELDS = ("name", "rating", "date")
REVIEW_SORT_FIELDS = ("rating", "date")
SORT_ORDERS = ("asc", "desc")

DEFAULT_LIMIT = 10
DEFAULT_OFFSET = 0
MAX_LIMIT = 100


class InvalidParameterError(ValueError):
    """A list/search parameter is missing its required shape or range."""


@dataclass(frozen=True)
class RecordFilter:
    """Selection applied before ordering. Empty filter matches every record."""

    name_contains: str | None = None
    created_since: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return self.name_contains is None and self.created_since is None


@dataclass(frozen=True)
class QuerySpec:
    """Normalized, validated list request."""

    filter: RecordFilter = field(default_factory=RecordFilter)
    sort_field: str = "rating"
    sort_order: str = "desc"
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET
    geo_target: GeoPoint | None = None

    @property
    def descending(self) -> bool:
        return self.sort_order == "desc"


def _parse_int(raw: str | int | None, name: str, default: int) -> int:
    if raw is None:
        return default
    if isinstance(raw, bool):
        raise InvalidParameterError(f"'{name}' must be an integer")
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    # ASCII digits only: int() would also take "1_0" and other scripts' digits.
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not (digits.isascii() and digits.isdigit()):
        raise InvalidParameterError(f"'{name}' must be an integer")
    return int(text, 10)


def parse_limit(raw: str | int | None) -> int:
    limit = _parse_int(raw, "limit", DEFAULT_LIMIT)
    if limit < 1 or limit > MAX_LIMIT:
        raise InvalidParameterError(f"'limit' must be a number between 1 and {MAX_LIMIT}")
    return limit


def parse_offset(raw: str | int | None) -> int:
    offset = _parse_int(raw, "offset", DEFAULT_OFFSET)
    if offset < 0:
        raise InvalidParameterError("'offset' must be a positive number")
    return offset


def parse_iso_datetime(raw: str) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are read as UTC. Returns naive UTC."""
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidParameterError("'q' is not a valid ISO date string for searchBy=date") from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_coordinates(raw) -> GeoPoint:
    """
    Parse a [lng, lat] pair, given either as a JSON text or as an already decoded list.
    Both members must be numbers (not booleans) inside the geographic bounds.
    """
    value = raw
    if isinstance(raw, str):
        try:
            value = json.loads(raw)
        except ValueError:
            raise InvalidParameterError("Coordinates must be a JSON array [lng, lat]") from None
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 2
        or any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in value)
    ):
        raise InvalidParameterError("Coordinates must be a JSON array [lng, lat]")
    lng, lat = float(value[0]), float(value[1])
    if not is_valid_position(lng, lat):
        raise InvalidParameterError("Coordinates must be within valid geographic bounds")
    return GeoPoint(lng=lng, lat=lat)


def _check_sort(sort: str, order: str, allowed: tuple[str, ...]) -> None:
    if sort not in allowed:
        raise InvalidParameterError(f"'sort' must be one of: {', '.join(allowed)}")
    if order not in SORT_ORDERS:
        raise InvalidParameterError(f"'order' must be one of: {', '.join(SORT_ORDERS)}")


def plan_location_query(
    q: str | None = None,
    search_by: str | None = None,
    sort: str | None = None,
    order: str | None = None,
    limit: str | int | None = None,
    offset: str | int | None = None,
) -> QuerySpec:
    """
    Build the QuerySpec for the location list.

    A search is applied only when both q and search_by are present; either one
    alone means "no search". Coordinates mode yields a geo target and the
    requested sort is then ignored by the executor.
    """
    parsed_limit = parse_limit(limit)
    parsed_offset = parse_offset(offset)
    if search_by and search_by not in LOCATION_SEARCH_FIELDS:
        raise InvalidParameterError(f"'searchBy' must be one of: {', '.join(LOCATION_SEARCH_FIELDS)}")
    sort = sort or "rating"
    order = order or "desc"
    _check_sort(sort, order, LOCATION_SORT_FIELDS)

    record_filter = RecordFilter()
    geo_target = None
    if q and search_by:
        if search_by == "name":
            record_filter = RecordFilter(name_contains=q)
        elif search_by == "date":
            record_filter = RecordFilter(created_since=parse_iso_datetime(q))
        else:
            try:
                geo_target = parse_coordinates(q)
            except InvalidParameterError as e:
                raise InvalidParameterError(f"'q' is not valid for searchBy=coordinates: {e}") from None

    return QuerySpec(
        filter=record_filter,
        sort_field=sort,
        sort_order=order,
        limit=parsed_limit,
        offset=parsed_offset,
        geo_target=geo_target,
    )


def plan_review_query(
    sort: str | None = None,
    order: str | None = None,
    limit: str | int | None = None,
    offset: str | int | None = None,
) -> QuerySpec:
    """Build the QuerySpec for a location's review list (default: newest first)."""
    parsed_limit = parse_limit(limit)
    parsed_offset = parse_offset(offset)
    sort = sort or "date"
    order = order or "desc"
    _check_sort(sort, order, REVIEW_SORT_FIELDS)
    return QuerySpec(sort_field=sort, sort_order=order, limit=parsed_limit, offset=parsed_offset)
