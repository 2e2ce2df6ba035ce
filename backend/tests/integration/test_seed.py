"""Integration tests: demo data seeding."""
import pytest

from catalog_core.rating import recompute
from models.location import Location
from utils.seed import seed_demo_locations

pytestmark = pytest.mark.integration


def test_seed_skips_non_empty_catalog(db_session, make_location):
    """Seeding never adds to a catalog that already has data."""
    make_location(name="Existing")
    assert seed_demo_locations(db_session, 5, seed=1) == 0


def test_seed_creates_consistent_locations(db_session):
    """Seeded locations have valid coordinates and ratings matching their reviews."""
    if db_session.query(Location).count():
        pytest.skip("catalog not empty")
    assert seed_demo_locations(db_session, 5, seed=42) == 5
    locations = db_session.query(Location).all()
    assert len(locations) == 5
    for loc in locations:
        assert -180 <= loc.lng <= 180 and -90 <= loc.lat <= 90
        assert loc.rating == recompute(r.rating for r in loc.reviews)
        assert all(0 <= r.rating <= 5 for r in loc.reviews)
