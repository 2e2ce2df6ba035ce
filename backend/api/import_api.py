"""Import API: Foursquare places and CSV/JSON file uploads, both via the normal location creation path."""
import logging
from collections.abc import Generator
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from api.locations import location_to_response
from db import get_db
from repositories.location_repository import create_location as repo_create_location
from schemas.common import Envelope
from utils.foursquare_client import FoursquareClient, FoursquareError, place_to_location_payload
from utils.import_parsers import parse_upload
from utils.import_validators import validate_location_row

LOG = logging.getLogger(__name__)

router = APIRouter(tags=["import"])

LOCATIONS_CSV_TEMPLATE = (
    "name,lng,lat,address,description,tags,imageUrl\n"
    'Santiago Bernabeu,-3.688333,40.453056,"Av. de Concha Espina, 1, Madrid",Football stadium,"stadium,football",\n'
)
LOCATIONS_JSON_TEMPLATE = """[
  {
    "name": "Santiago Bernabeu",
    "coordinates": [-3.688333, 40.453056],
    "address": "Av. de Concha Espina, 1, Madrid",
    "description": "Football stadium",
    "tags": ["stadium", "football"],
    "imageUrl": null
  }
]
"""


def get_foursquare_client() -> Generator[FoursquareClient, None, None]:
    """FastAPI dependency: yield a Places client and close it after the request."""
    with FoursquareClient() as client:
        yield client


def _import_rows(db: Session, rows: list[dict[str, Any]]) -> dict[str, list]:
    """Validate and create each row; bad rows are reported, not fatal."""
    success: list[dict] = []
    failed: list[dict] = []
    for raw_row in rows:
        ok, normalized, err = validate_location_row(raw_row)
        if not ok or normalized is None:
            LOG.warning("Skipping import row %r: %s", raw_row.get("name"), err)
            failed.append({"row": raw_row, "error": err})
            continue
        loc = repo_create_location(db, **normalized)
        success.append(location_to_response(loc).model_dump(mode="json"))
    LOG.info("Imported %d locations, %d rows failed", len(success), len(failed))
    return {"success": success, "failed": failed}


@router.get("/foursquare/locations", response_model=Envelope[list[dict]])
def list_foursquare_places(
    query: str | None = None,
    ll: str | None = None,
    client: FoursquareClient = Depends(get_foursquare_client),
) -> Envelope[list[dict]]:
    """Preview Foursquare places as location payloads (nothing is stored)."""
    try:
        places = client.search_places(query=query, ll=ll)
    except FoursquareError as e:
        LOG.error("Foursquare search failed: %s", e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Error fetching Foursquare places") from e
    previews = []
    for place in places:
        try:
            previews.append(place_to_location_payload(place))
        except ValueError as e:
            LOG.warning("Skipping Foursquare place: %s", e)
    return Envelope[list[dict]](message="Foursquare places retrieved successfully", data=previews)


@router.get("/foursquare/locations/{place_id}", response_model=Envelope[dict])
def get_foursquare_place(
    place_id: str,
    client: FoursquareClient = Depends(get_foursquare_client),
) -> Envelope[dict]:
    """Preview one Foursquare place as a location payload."""
    try:
        place = client.get_place(place_id)
        payload = place_to_location_payload(place)
    except (FoursquareError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found") from e
    return Envelope[dict](message="Foursquare location retrieved successfully", data=payload)


@router.post("/foursquare/locations/import", response_model=Envelope[dict], status_code=status.HTTP_201_CREATED)
def import_foursquare_places(
    query: str | None = None,
    ll: str | None = None,
    client: FoursquareClient = Depends(get_foursquare_client),
    db: Session = Depends(get_db),
) -> Envelope[dict]:
    """Fetch Foursquare places and store them as locations."""
    try:
        places = client.search_places(query=query, ll=ll)
    except FoursquareError as e:
        LOG.error("Foursquare search failed: %s", e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Error fetching Foursquare places") from e
    rows: list[dict[str, Any]] = []
    failed: list[dict] = []
    for place in places:
        try:
            rows.append(place_to_location_payload(place))
        except ValueError as e:
            failed.append({"row": {"externalId": place.get("fsq_id")}, "error": str(e)})
    result = _import_rows(db, rows)
    result["failed"] = failed + result["failed"]
    return Envelope[dict](message="Foursquare places imported", data=result)


async def _read_upload(file: UploadFile) -> bytes:
    """Read full content of uploaded file."""
    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file")
    return content


@router.post("/import/locations", response_model=Envelope[dict])
async def import_locations_file(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
) -> Envelope[dict]:
    """Upload CSV or JSON; import valid location rows; return success and failed lists."""
    content = await _read_upload(file)
    try:
        rows = parse_upload(content, file.filename)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return Envelope[dict](message="Locations imported", data=_import_rows(db, rows))


@router.get("/import/templates/locations.csv", response_class=Response)
def template_locations_csv():
    """Download locations CSV template."""
    return Response(
        content=LOCATIONS_CSV_TEMPLATE,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="locations.csv"'},
    )


@router.get("/import/templates/locations.json", response_class=Response)
def template_locations_json():
    """Download locations JSON template."""
    return Response(
        content=LOCATIONS_JSON_TEMPLATE,
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="locations.json"'},
    )
