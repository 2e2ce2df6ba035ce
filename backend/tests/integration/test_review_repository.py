"""Integration tests: review mutations keep the location rating consistent."""
from datetime import datetime

import pytest
from sqlalchemy.orm.exc import StaleDataError

from catalog_core.geo_ranker import GeoPoint
from catalog_core.query_planner import plan_review_query
from catalog_core.rating import recompute
from catalog_core.search_executor import execute
from repositories.location_repository import get_location
from repositories.review_repository import (
    create_review,
    delete_review,
    get_review,
    lock_location,
    review_source,
    update_review,
)

pytestmark = pytest.mark.integration


def _add(db_session, loc_id, rating, author="Ana", position=None):
    return create_review(db_session, loc_id, author=author, rating=rating, review_text="text", position=position)


def _assert_consistent(db_session, loc_id):
    loc = lock_location(db_session, loc_id)
    assert loc.rating == recompute(r.rating for r in loc.reviews)
    return loc


def test_rating_follows_create_update_delete(db_session, make_location):
    """[5, 4.5] gives 4.75; deleting the 4.5 gives 5; deleting the last gives 0."""
    loc = make_location(name="Rating Flow")
    first = _add(db_session, loc.id, 5)
    second = _add(db_session, loc.id, 4.5)
    loc = _assert_consistent(db_session, loc.id)
    assert loc.rating == 4.75 and loc.num_reviews == 2

    assert delete_review(db_session, loc.id, second.id) is True
    loc = _assert_consistent(db_session, loc.id)
    assert loc.rating == 5 and loc.num_reviews == 1

    assert delete_review(db_session, loc.id, first.id) is True
    loc = _assert_consistent(db_session, loc.id)
    assert loc.rating == 0 and loc.num_reviews == 0


def test_update_rating_recomputes(db_session, make_location):
    """Changing a review's rating changes the mean."""
    loc = make_location(name="Rating Update")
    review = _add(db_session, loc.id, 1)
    _add(db_session, loc.id, 2)
    update_review(db_session, loc.id, review.id, {"rating": 5})
    assert _assert_consistent(db_session, loc.id).rating == 3.5


def test_update_without_rating_keeps_mean_and_created_on(db_session, make_location):
    """Text/author/position edits leave rating and createdOn untouched."""
    loc = make_location(name="Review Edit")
    review = _add(db_session, loc.id, 4)
    created = review.created_on
    updated = update_review(
        db_session, loc.id, review.id,
        {"author": "Bea", "review_text": "better", "position": GeoPoint(lng=1.0, lat=2.0)},
    )
    assert (updated.author, updated.review_text, updated.coordinates) == ("Bea", "better", [1.0, 2.0])
    assert updated.created_on == created
    assert _assert_consistent(db_session, loc.id).rating == 4


def test_every_mutation_bumps_version(db_session, make_location):
    """Creates, deletes and rating changes write the location row; an unchanged rating does not."""
    loc = make_location(name="Versioned")
    start = loc.version
    review = _add(db_session, loc.id, 3)
    update_review(db_session, loc.id, review.id, {"rating": 3})
    delete_review(db_session, loc.id, review.id)
    assert get_location(db_session, loc.id).version == start + 2


def test_missing_location_or_review(db_session, make_location):
    """Mutations on unknown ids return None/False and write nothing."""
    loc = make_location(name="Missing")
    assert _add(db_session, "nope", 3) is None
    assert update_review(db_session, loc.id, "nope", {"rating": 1}) is None
    assert update_review(db_session, "nope", "nope", {"rating": 1}) is None
    assert delete_review(db_session, loc.id, "nope") is False
    assert delete_review(db_session, "nope", "nope") is False
    assert get_review(db_session, loc.id, "nope") is None


def test_review_scoped_to_location(db_session, make_location):
    """A review id is only found under its own location."""
    a = make_location(name="Scope A")
    b = make_location(name="Scope B")
    review = _add(db_session, a.id, 2)
    assert get_review(db_session, a.id, review.id) is not None
    assert get_review(db_session, b.id, review.id) is None
    assert delete_review(db_session, b.id, review.id) is False


def test_stale_location_write_raises(db_session, make_location):
    """A write from a stale snapshot of the location fails instead of overwriting."""
    loc = make_location(name="Stale")
    db_session.connection().exec_driver_sql(
        "UPDATE location SET version = version + 1 WHERE id = ?", (loc.id,)
    )
    loc.rating = 1.0
    with pytest.raises(StaleDataError):
        db_session.flush()
    db_session.rollback()


def test_review_listing_default_newest_first(db_session, make_location):
    """Reviews page by date desc by default; rating sort breaks ties by id."""
    loc = make_location(name="Review List")
    reviews = [_add(db_session, loc.id, r) for r in (3, 5, 3)]
    for i, review in enumerate(reviews):
        review.created_on = datetime(2024, 1, i + 1)
    db_session.commit()
    loc = lock_location(db_session, loc.id)

    page = execute(plan_review_query(), review_source(loc))
    assert [r.id for r in page.results] == [reviews[2].id, reviews[1].id, reviews[0].id]

    page = execute(plan_review_query(sort="rating", order="asc", limit=2), review_source(loc))
    assert [r.id for r in page.results] == sorted([reviews[0].id, reviews[2].id])
    assert page.total == 3
