# Catalog core: query planning, geo ranking, rating aggregation, search execution
from catalog_core.geo_ranker import GeoPoint, haversine_km, rank_by_distance
from catalog_core.query_planner import (
    InvalidParameterError,
    QuerySpec,
    RecordFilter,
    plan_location_query,
    plan_review_query,
)
from catalog_core.rating import recompute, refresh_location_rating
from catalog_core.search_executor import SearchPage, execute
from catalog_core.sources import Ordering, RecordSource, SequenceSource

__all__ = [
    "GeoPoint",
    "InvalidParameterError",
    "Ordering",
    "QuerySpec",
    "RecordFilter",
    "RecordSource",
    "SearchPage",
    "SequenceSource",
    "execute",
    "haversine_km",
    "plan_location_query",
    "plan_review_query",
    "rank_by_distance",
    "recompute",
    "refresh_location_rating",
]
