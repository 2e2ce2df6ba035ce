"""Random demo data for an empty catalog (SEED_DEMO_DATA=true)."""
import logging
import random

from sqlalchemy.orm import Session

from catalog_core.geo_ranker import GeoPoint
from repositories.location_repository import count_locations, create_location
from repositories.review_repository import create_review

LOG = logging.getLogger(__name__)

_TAGS = ["coffee", "museum", "bar", "restaurant", "shopping", "library"]
_PLACES = ["Plaza", "Garden", "Market", "Gallery", "Tower", "Harbour", "Library", "Cafe"]
_CITIES = ["Madrid", "Lisbon", "Porto", "Seville", "Valencia", "Bilbao", "Granada", "Malaga"]
_AUTHORS = ["Ana Ruiz", "Carl Johnson", "Olivia Knight", "Michael Kane", "Lucia Marin", "Tom Weber"]
_PHRASES = ["Great spot.", "Would come back.", "Too crowded at noon.", "Friendly staff.", "Nice views."]


def seed_demo_locations(session: Session, count: int, seed: int | None = None) -> int:
    """
    Create count random locations with 0-6 reviews each, unless the catalog has data.
    Goes through the regular create/review paths so ratings stay consistent.
    Returns the number of locations created.
    """
    existing = count_locations(session)
    if existing > 0:
        LOG.warning("Catalog already has %d locations, skipping demo seed", existing)
        return 0
    rng = random.Random(seed)
    for _ in range(count):
        position = GeoPoint(lng=round(rng.uniform(-180, 180), 6), lat=round(rng.uniform(-90, 90), 6))
        loc = create_location(
            session,
            name=f"{rng.choice(_CITIES)} {rng.choice(_PLACES)}",
            position=position,
            address=f"{rng.randint(1, 300)} Calle Mayor",
            description=" ".join(rng.sample(_PHRASES, 2)),
            tags=rng.sample(_TAGS, 2),
        )
        for _ in range(rng.randint(0, 6)):
            create_review(
                session,
                loc.id,
                author=rng.choice(_AUTHORS),
                rating=round(rng.uniform(0, 5), 1),
                review_text=rng.choice(_PHRASES),
                position=position,
            )
    LOG.info("Seeded %d demo locations", count)
    return count
