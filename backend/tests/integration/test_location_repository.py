"""Integration tests: location repository and SQL record source (in-memory SQLite)."""
from datetime import datetime, timedelta

import pytest

from catalog_core.geo_ranker import GeoPoint
from catalog_core.query_planner import RecordFilter, plan_location_query
from catalog_core.search_executor import execute
from catalog_core.sources import Ordering
from models.image import Image
from models.review import Review
from repositories.image_repository import get_image, normalize_image_url
from repositories.location_repository import (
    SqlLocationSource,
    delete_location,
    get_location,
    update_location,
)
from repositories.review_repository import create_review

pytestmark = pytest.mark.integration


def test_create_location_defaults(make_location):
    """New locations get an id, creation time, rating 0 and no reviews."""
    loc = make_location(name="Repo Create", tags=["a", None, "b"])
    assert loc.id and loc.created_on is not None
    assert loc.rating == 0
    assert loc.num_reviews == 0
    assert loc.tags == ["a", "b"]
    assert loc.coordinates == [-3.688333, 40.453056]
    assert loc.image_id is None


def test_create_location_with_image(db_session, make_location):
    """A valid imageUrl creates an image record referenced by the location."""
    loc = make_location(name="Repo Image", image_url=" https://img.test/a.jpg ")
    image = get_image(db_session, loc.image_id)
    assert image is not None and image.url == "https://img.test/a.jpg"


def test_invalid_image_url_is_skipped(make_location):
    """Non-http(s) image URLs are ignored, not fatal."""
    loc = make_location(name="Repo Bad Image", image_url="ftp://img.test/a.jpg")
    assert loc.image_id is None
    assert normalize_image_url("not a url") is None
    assert normalize_image_url("") is None


def test_get_location_unknown(db_session):
    """Unknown and malformed ids both resolve to None."""
    assert get_location(db_session, "00000000-0000-0000-0000-000000000000") is None
    assert get_location(db_session, "not-an-id") is None


def test_update_location_partial(db_session, make_location):
    """Only given keys change; position replaces both coordinates."""
    loc = make_location(name="Repo Update", address="Old", description="Keep")
    update_location(db_session, loc, {"address": "New", "position": GeoPoint(lng=2.0, lat=41.0)})
    assert loc.address == "New"
    assert loc.description == "Keep"
    assert loc.coordinates == [2.0, 41.0]


def test_update_location_replaces_image(db_session, make_location):
    """A new image URL replaces the image record and removes the old one."""
    loc = make_location(name="Repo Swap", image_url="https://img.test/old.jpg")
    old_id = loc.image_id
    update_location(db_session, loc, {"image_url": "https://img.test/new.jpg"})
    assert loc.image_id != old_id
    assert get_image(db_session, old_id) is None
    assert get_image(db_session, loc.image_id).url == "https://img.test/new.jpg"


def test_delete_location_removes_reviews_and_image(db_session, make_location):
    """Deleting a location removes its reviews and its image."""
    loc = make_location(name="Repo Delete", image_url="https://img.test/d.jpg")
    loc_id, image_id = loc.id, loc.image_id
    create_review(db_session, loc_id, author="Ana", rating=4, review_text="ok", position=None)
    assert delete_location(db_session, loc_id) is True
    db_session.expire_all()
    assert get_location(db_session, loc_id) is None
    assert db_session.get(Image, image_id) is None
    assert db_session.query(Review).filter(Review.location_id == loc_id).count() == 0
    assert delete_location(db_session, loc_id) is False


def test_sql_source_name_filter_escapes_wildcards(db_session, make_location):
    """Name search is a literal, case-insensitive substring match."""
    make_location(name="Zq 100% Organic")
    make_location(name="Zq 1000 Organic")
    source = SqlLocationSource(db_session)
    assert [loc.name for loc in source.find_matching(RecordFilter(name_contains="100%"))] == ["Zq 100% Organic"]
    assert source.count(RecordFilter(name_contains="zQ 10")) == 2


def test_sql_source_ordering_and_window(db_session, make_location):
    """Ordering falls back to id on ties; offset/limit cut the window in SQL."""
    locs = [make_location(name=f"Zw Order {i}") for i in range(4)]
    for loc, rating in zip(locs, (2.0, 4.0, 4.0, 1.0)):
        loc.rating = rating
    db_session.commit()
    source = SqlLocationSource(db_session)
    flt = RecordFilter(name_contains="Zw Order")
    ordered = source.find_matching(flt, Ordering(field="rating", descending=True))
    tied = sorted([locs[1].id, locs[2].id])
    assert [loc.id for loc in ordered] == tied + [locs[0].id, locs[3].id]
    window = source.find_matching(flt, Ordering(field="rating", descending=True), offset=1, limit=2)
    assert [loc.id for loc in window] == [tied[1], locs[0].id]


def test_sql_source_date_filter(db_session, make_location):
    """created_since keeps records created at or after the instant."""
    old = make_location(name="Zd Old")
    new = make_location(name="Zd New")
    old.created_on = datetime(2001, 1, 1)
    db_session.commit()
    source = SqlLocationSource(db_session)
    since = RecordFilter(created_since=new.created_on - timedelta(seconds=1))
    ids = {loc.id for loc in source.find_matching(since)}
    assert new.id in ids and old.id not in ids


def test_geo_search_through_sql_source(db_session, make_location):
    """Executor ranks SQL candidates by distance within 500 km."""
    near = make_location(name="Zg Near", lng=151.21, lat=-33.87)
    nearer = make_location(name="Zg Nearer", lng=151.2, lat=-33.86)
    make_location(name="Zg Far", lng=144.96, lat=-37.81)
    page = execute(plan_location_query(q="[151.2, -33.86]", search_by="coordinates"), SqlLocationSource(db_session))
    assert [loc.id for loc in page.results] == [nearer.id, near.id]
    assert page.total == 2
