"""Review API routes. Every mutation recomputes the owning location's rating."""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from api.locations import LOCATION_NOT_FOUND, conflict_error
from catalog_core.query_planner import InvalidParameterError, plan_review_query
from catalog_core.search_executor import execute
from db import get_db
from models.review import Review
from repositories.location_repository import get_location
from repositories.review_repository import (
    create_review as repo_create_review,
    delete_review as repo_delete_review,
    get_review,
    review_source,
    update_review as repo_update_review,
)
from schemas.common import Envelope, Page
from schemas.reviews import ReviewCreate, ReviewResponse, ReviewUpdate

router = APIRouter(prefix="/locations/{location_id}/reviews", tags=["reviews"])

REVIEW_NOT_FOUND = "Review not found"


def review_to_response(review: Review) -> ReviewResponse:
    """Build ReviewResponse from model instance."""
    return ReviewResponse(
        id=review.id,
        author=review.author,
        reviewText=review.review_text,
        rating=review.rating,
        createdOn=review.created_on,
        coordinates=review.coordinates,
    )


def _require_location(db: Session, location_id: str):
    loc = get_location(db, location_id)
    if loc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LOCATION_NOT_FOUND)
    return loc


@router.get("", response_model=Envelope[Page[ReviewResponse]])
def list_reviews(
    location_id: str,
    sort: str | None = None,
    order: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
    db: Session = Depends(get_db),
) -> Envelope[Page[ReviewResponse]]:
    """Page a location's reviews, sorted by rating or date (default: newest first)."""
    loc = _require_location(db, location_id)
    try:
        spec = plan_review_query(sort=sort, order=order, limit=limit, offset=offset)
    except InvalidParameterError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    page = execute(spec, review_source(loc))
    return Envelope[Page[ReviewResponse]](
        message="Reviews retrieved successfully",
        data=Page[ReviewResponse](
            total=page.total,
            limit=page.limit,
            offset=page.offset,
            results=[review_to_response(r) for r in page.results],
        ),
    )


@router.get("/{review_id}", response_model=Envelope[ReviewResponse])
def get_review_by_id(location_id: str, review_id: str, db: Session = Depends(get_db)) -> Envelope[ReviewResponse]:
    """Get one review of a location."""
    _require_location(db, location_id)
    review = get_review(db, location_id, review_id)
    if review is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=REVIEW_NOT_FOUND)
    return Envelope[ReviewResponse](message="Review found", data=review_to_response(review))


@router.post("", response_model=Envelope[ReviewResponse], status_code=status.HTTP_201_CREATED)
def create_review(
    location_id: str,
    body: ReviewCreate,
    db: Session = Depends(get_db),
) -> Envelope[ReviewResponse]:
    """Add a review to a location."""
    _require_location(db, location_id)
    try:
        review = repo_create_review(
            db,
            location_id,
            author=body.author,
            rating=body.rating,
            review_text=body.reviewText,
            position=body.position,
        )
    except StaleDataError as e:
        raise conflict_error(db, location_id, e) from e
    if review is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LOCATION_NOT_FOUND)
    return Envelope[ReviewResponse](message="Review created successfully", data=review_to_response(review))


@router.put("/{review_id}", response_model=Envelope[ReviewResponse])
def update_review(
    location_id: str,
    review_id: str,
    body: ReviewUpdate,
    db: Session = Depends(get_db),
) -> Envelope[ReviewResponse]:
    """Update the fields present in the body. createdOn never changes."""
    _require_location(db, location_id)
    if get_review(db, location_id, review_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=REVIEW_NOT_FOUND)
    try:
        review = repo_update_review(db, location_id, review_id, body.to_changes())
    except StaleDataError as e:
        raise conflict_error(db, location_id, e) from e
    if review is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=REVIEW_NOT_FOUND)
    return Envelope[ReviewResponse](message="Review updated successfully", data=review_to_response(review))


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_review(location_id: str, review_id: str, db: Session = Depends(get_db)) -> Response:
    """Delete a review."""
    _require_location(db, location_id)
    try:
        deleted = repo_delete_review(db, location_id, review_id)
    except StaleDataError as e:
        raise conflict_error(db, location_id, e) from e
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=REVIEW_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
