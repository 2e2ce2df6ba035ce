"""Great-circle distance ranking of catalog records around a reference point."""
import math
from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

EARTH_RADIUS_KM = 6371.0
MAX_RADIUS_KM = 500.0

T = TypeVar("T")


@dataclass(frozen=True)
class GeoPoint:
    """A (longitude, latitude) pair in degrees."""

    lng: float
    lat: float

    def as_list(self) -> list[float]:
        return [self.lng, self.lat]


def is_valid_position(lng: float, lat: float) -> bool:
    """True when lng is in [-180, 180] and lat in [-90, 90]."""
    return -180.0 <= lng <= 180.0 and -90.0 <= lat <= 90.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in km between two points (haversine, spherical Earth)."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    # Rounding can push h marginally above 1 for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def rank_by_distance(
    target: GeoPoint,
    candidates: Iterable[T],
    position_of: Callable[[T], GeoPoint | None],
    max_radius_km: float = MAX_RADIUS_KM,
) -> list[tuple[float, T]]:
    """
    Return (distance_km, candidate) pairs within max_radius_km of target, nearest first.

    Candidates without a position are skipped. The sort is stable, so equal
    distances keep the order in which candidates were supplied.
    """
    ranked: list[tuple[float, T]] = []
    for candidate in candidates:
        position = position_of(candidate)
        if position is None:
            continue
        distance = haversine_km(target, position)
        if distance <= max_radius_km:
            ranked.append((distance, candidate))
    ranked.sort(key=lambda pair: pair[0])
    return ranked
