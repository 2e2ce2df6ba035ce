"""Materialized location rating: mean of review ratings, 2 decimals, half-up."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

_TWO_PLACES = Decimal("0.01")


def recompute(ratings: Iterable[float]) -> float:
    """Mean of ratings rounded half-up to 2 decimals; 0 for no ratings."""
    values = [Decimal(str(r)) for r in ratings]
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    return float(mean.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def refresh_location_rating(location) -> float:
    """Recompute location.rating from location.reviews and store it on the record."""
    location.rating = recompute(review.rating for review in location.reviews)
    return location.rating
