"""Run a QuerySpec against a record source and cut one page of results."""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from catalog_core.geo_ranker import GeoPoint, MAX_RADIUS_KM, rank_by_distance
from catalog_core.query_planner import QuerySpec
from catalog_core.sources import Ordering, RecordSource

LOG = logging.getLogger(__name__)


@dataclass
class SearchPage:
    """One page of an ordered result set; total counts every match before paging."""

    total: int
    limit: int
    offset: int
    results: list[Any] = field(default_factory=list)


def _position(record) -> GeoPoint | None:
    return record.position


def execute(
    spec: QuerySpec,
    source: RecordSource,
    position_of: Callable[[Any], GeoPoint | None] = _position,
    max_radius_km: float = MAX_RADIUS_KM,
) -> SearchPage:
    """
    Select, order and page records for spec.

    With a geo target the candidates are ranked by distance (requested sort is
    ignored) and total is the number within radius. Otherwise the filter is
    pushed to the source together with the ordering and window.
    """
    if spec.geo_target is not None:
        candidates = source.find_matching(spec.filter)
        ranked = rank_by_distance(spec.geo_target, candidates, position_of, max_radius_km)
        window = ranked[spec.offset:spec.offset + spec.limit]
        LOG.debug(
            "geo search around %s: %d within %.0f km", spec.geo_target.as_list(), len(ranked), max_radius_km
        )
        return SearchPage(
            total=len(ranked),
            limit=spec.limit,
            offset=spec.offset,
            results=[record for _, record in window],
        )

    total = source.count(spec.filter)
    if spec.offset >= total:
        return SearchPage(total=total, limit=spec.limit, offset=spec.offset, results=[])
    results = list(
        source.find_matching(
            spec.filter,
            ordering=Ordering(field=spec.sort_field, descending=spec.descending),
            offset=spec.offset,
            limit=spec.limit,
        )
    )
    return SearchPage(total=total, limit=spec.limit, offset=spec.offset, results=results)
