"""Location API routes: search/list, get, create, update, delete."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from catalog_core.query_planner import InvalidParameterError, plan_location_query
from catalog_core.search_executor import execute
from db import get_db
from models.location import Location
from repositories.location_repository import (
    SqlLocationSource,
    create_location as repo_create_location,
    delete_location as repo_delete_location,
    get_location,
    update_location as repo_update_location,
)
from schemas.common import Envelope, Page
from schemas.locations import LocationCreate, LocationResponse, LocationUpdate

LOG = logging.getLogger(__name__)

router = APIRouter(prefix="/locations", tags=["locations"])

LOCATION_NOT_FOUND = "Location not found"


def conflict_error(db: Session, location_id: str, e: StaleDataError) -> HTTPException:
    """Roll back a write that lost a race on the location row; 409 for the caller."""
    db.rollback()
    LOG.warning("Concurrent modification of location %s: %s", location_id, e)
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Location was modified by another request; retry",
    )


def location_to_response(loc: Location) -> LocationResponse:
    """Build LocationResponse from model instance."""
    return LocationResponse(
        id=loc.id,
        name=loc.name,
        address=loc.address,
        description=loc.description,
        rating=loc.rating,
        tags=list(loc.tags or []),
        numReviews=loc.num_reviews,
        coordinates=loc.coordinates,
        createdOn=loc.created_on,
        imageId=loc.image_id,
    )


@router.get("", response_model=Envelope[Page[LocationResponse]])
def list_locations(
    q: str | None = None,
    searchBy: str | None = None,
    sort: str | None = None,
    order: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
    db: Session = Depends(get_db),
) -> Envelope[Page[LocationResponse]]:
    """
    Search and page locations. q and searchBy (name | date | coordinates) must
    both be present for a search to apply; coordinates mode orders by distance.
    """
    try:
        spec = plan_location_query(q=q, search_by=searchBy, sort=sort, order=order, limit=limit, offset=offset)
    except InvalidParameterError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    page = execute(spec, SqlLocationSource(db))
    return Envelope[Page[LocationResponse]](
        message="Locations retrieved successfully",
        data=Page[LocationResponse](
            total=page.total,
            limit=page.limit,
            offset=page.offset,
            results=[location_to_response(loc) for loc in page.results],
        ),
    )


@router.get("/{location_id}", response_model=Envelope[LocationResponse])
def get_location_by_id(location_id: str, db: Session = Depends(get_db)) -> Envelope[LocationResponse]:
    """Get one location."""
    loc = get_location(db, location_id)
    if loc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LOCATION_NOT_FOUND)
    return Envelope[LocationResponse](message="Location found", data=location_to_response(loc))


@router.post("", response_model=Envelope[LocationResponse], status_code=status.HTTP_201_CREATED)
def create_location(body: LocationCreate, db: Session = Depends(get_db)) -> Envelope[LocationResponse]:
    """Create a location. It always starts with rating 0 and no reviews."""
    loc = repo_create_location(
        db,
        name=body.name,
        position=body.position,
        address=body.address,
        description=body.description,
        tags=body.tags,
        image_url=body.imageUrl,
    )
    return Envelope[LocationResponse](message="Location created successfully", data=location_to_response(loc))


@router.put("/{location_id}", response_model=Envelope[LocationResponse])
def update_location(
    location_id: str,
    body: LocationUpdate,
    db: Session = Depends(get_db),
) -> Envelope[LocationResponse]:
    """Update the fields present in the body; coordinates are replaced as a pair."""
    loc = get_location(db, location_id)
    if loc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LOCATION_NOT_FOUND)
    try:
        loc = repo_update_location(db, loc, body.to_changes())
    except StaleDataError as e:
        raise conflict_error(db, location_id, e) from e
    return Envelope[LocationResponse](message="Location updated successfully", data=location_to_response(loc))


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_location(location_id: str, db: Session = Depends(get_db)) -> Response:
    """Delete a location together with its reviews and image reference."""
    try:
        deleted = repo_delete_location(db, location_id)
    except StaleDataError as e:
        raise conflict_error(db, location_id, e) from e
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LOCATION_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
