"""Unit tests: haversine distance and distance ranking."""
from types import SimpleNamespace

import pytest

from catalog_core.geo_ranker import MAX_RADIUS_KM, GeoPoint, haversine_km, rank_by_distance

pytestmark = pytest.mark.unit

MADRID = GeoPoint(lng=-3.7038, lat=40.4168)
BARCELONA = GeoPoint(lng=2.1734, lat=41.3851)
VALENCIA = GeoPoint(lng=-0.3763, lat=39.4699)
PARIS = GeoPoint(lng=2.3522, lat=48.8566)


def test_haversine_zero_distance():
    """Distance from a point to itself is 0."""
    assert haversine_km(MADRID, MADRID) == pytest.approx(0.0)


def test_haversine_known_distance():
    """Madrid-Barcelona is about 505 km on a 6371 km sphere."""
    assert haversine_km(MADRID, BARCELONA) == pytest.approx(505, abs=3)
    assert haversine_km(MADRID, BARCELONA) == pytest.approx(haversine_km(BARCELONA, MADRID))


def test_haversine_antipodes():
    """Antipodal points are half the circumference apart."""
    d = haversine_km(GeoPoint(lng=0, lat=0), GeoPoint(lng=180, lat=0))
    assert d == pytest.approx(3.141592653589793 * 6371, rel=1e-9)


def _rec(rid, point):
    return SimpleNamespace(id=rid, position=point)


def test_rank_filters_radius_and_orders_ascending():
    """Only candidates within 500 km remain, nearest first."""
    records = [_rec("paris", PARIS), _rec("valencia", VALENCIA), _rec("madrid", MADRID), _rec("bcn", BARCELONA)]
    ranked = rank_by_distance(MADRID, records, lambda r: r.position)
    ids = [r.id for _, r in ranked]
    assert ids == ["madrid", "valencia"]
    distances = [d for d, _ in ranked]
    assert distances == sorted(distances)
    assert all(d <= MAX_RADIUS_KM for d in distances)


def test_rank_ties_keep_input_order():
    """Equal distances keep the order the candidates were supplied in."""
    records = [_rec("b", VALENCIA), _rec("a", VALENCIA), _rec("c", MADRID)]
    ranked = rank_by_distance(MADRID, records, lambda r: r.position)
    assert [r.id for _, r in ranked] == ["c", "b", "a"]


def test_rank_skips_records_without_position():
    """Candidates without a position never appear."""
    records = [_rec("none", None), _rec("madrid", MADRID)]
    assert [r.id for _, r in rank_by_distance(MADRID, records, lambda r: r.position)] == ["madrid"]


def test_rank_custom_radius():
    """A wider radius admits farther candidates."""
    records = [_rec("paris", PARIS)]
    assert rank_by_distance(MADRID, records, lambda r: r.position) == []
    assert len(rank_by_distance(MADRID, records, lambda r: r.position, max_radius_km=1100)) == 1
