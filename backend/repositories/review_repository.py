"""Review repository: review mutations that keep the parent location's rating in step.

Every mutation locks the owning location row, changes the review collection,
recomputes the rating and commits both in one transaction. The location's
version column is bumped on every mutation so a concurrent writer working from
a stale snapshot fails with StaleDataError instead of losing an update.
"""
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.attributes import flag_modified

from catalog_core.geo_ranker import GeoPoint
from catalog_core.rating import refresh_location_rating
from catalog_core.sources import SequenceSource
from models.location import Location
from models.review import Review

REVIEW_SORT_KEYS = {
    "rating": lambda r: r.rating,
    "date": lambda r: r.created_on,
}


def review_source(location: Location) -> SequenceSource:
    """Record source over the reviews owned by location."""
    return SequenceSource(
        location.reviews,
        sort_keys=REVIEW_SORT_KEYS,
        created_of=lambda r: r.created_on,
    )


def lock_location(session: Session, location_id: str) -> Optional[Location]:
    """Load a location and its reviews with a row lock (FOR UPDATE where supported)."""
    stmt = (
        select(Location)
        .where(Location.id == location_id)
        .options(selectinload(Location.reviews))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return session.execute(stmt).scalar_one_or_none()


def get_review(session: Session, location_id: str, review_id: str) -> Optional[Review]:
    """Return a review by id within a location, or None."""
    return session.execute(
        select(Review).where(Review.id == review_id, Review.location_id == location_id)
    ).scalar_one_or_none()


def _commit_with_rating(session: Session, location: Location) -> None:
    refresh_location_rating(location)
    # Force the versioned UPDATE even when the mean happens to be unchanged.
    flag_modified(location, "rating")
    session.commit()


def create_review(
    session: Session,
    location_id: str,
    *,
    author: str,
    rating: float,
    review_text: str,
    position: GeoPoint | None,
) -> Optional[Review]:
    """Append a review, recompute the location rating, commit. None if the location is gone."""
    location = lock_location(session, location_id)
    if location is None:
        return None
    review = Review(
        author=author,
        rating=rating,
        review_text=review_text,
        lng=position.lng if position else None,
        lat=position.lat if position else None,
    )
    location.reviews.append(review)
    _commit_with_rating(session, location)
    session.refresh(review)
    return review


def update_review(
    session: Session,
    location_id: str,
    review_id: str,
    changes: dict[str, Any],
) -> Optional[Review]:
    """
    Apply a partial update (author, rating, review_text, position) and commit.
    The location rating is recomputed only when the review's rating changes.
    Returns None if the location or review is gone.
    """
    location = lock_location(session, location_id)
    if location is None:
        return None
    review = next((r for r in location.reviews if r.id == review_id), None)
    if review is None:
        return None
    for key in ("author", "review_text"):
        if key in changes:
            setattr(review, key, changes[key])
    if changes.get("position") is not None:
        review.lng = changes["position"].lng
        review.lat = changes["position"].lat
    if "rating" in changes and changes["rating"] != review.rating:
        review.rating = changes["rating"]
        _commit_with_rating(session, location)
    else:
        session.commit()
    session.refresh(review)
    return review


def delete_review(session: Session, location_id: str, review_id: str) -> bool:
    """Remove a review, recompute the location rating, commit. False if not found."""
    location = lock_location(session, location_id)
    if location is None:
        return False
    review = next((r for r in location.reviews if r.id == review_id), None)
    if review is None:
        return False
    location.reviews.remove(review)
    _commit_with_rating(session, location)
    return True
