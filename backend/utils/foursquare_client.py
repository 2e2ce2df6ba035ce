"""Foursquare Places client and mapping of places onto location payloads.

Docs: https://docs.foursquare.com/developer/reference/place-search
      https://docs.foursquare.com/developer/reference/place-details
"""
import logging
from typing import Any

import httpx

from utils.config import FOURSQUARE_API_KEY, FOURSQUARE_API_URL, FOURSQUARE_TIMEOUT_S

LOG = logging.getLogger(__name__)

PLACE_SEARCH_PATH = "/v3/places/search"
PLACE_DETAILS_PATH = "/v3/places"
PLACE_FIELDS = "fsq_id,name,geocodes,location,categories,description,photos"


class FoursquareError(Exception):
    """Upstream call failed or answered with a non-200 status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FoursquareClient:
    """Thin synchronous wrapper over the Places API."""

    def __init__(
        self,
        base_url: str = FOURSQUARE_API_URL,
        api_key: str = FOURSQUARE_API_KEY,
        timeout: float = FOURSQUARE_TIMEOUT_S,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Accept": "application/json", "Authorization": api_key},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "FoursquareClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise FoursquareError(f"Error fetching {path}: {e}") from e
        if response.status_code != 200:
            raise FoursquareError(
                f"Error fetching {path}: expected status 200, received {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    def search_places(self, query: str | None = None, ll: str | None = None, limit: int | None = None) -> list[dict]:
        """Search places; ll is "lat,lng" as the Places API expects."""
        params: dict[str, Any] = {"fields": PLACE_FIELDS}
        if query:
            params["query"] = query
        if ll:
            params["ll"] = ll
        if limit:
            params["limit"] = limit
        body = self._get(PLACE_SEARCH_PATH, params)
        results = body.get("results") or []
        LOG.info("Foursquare search returned %d places", len(results))
        return results

    def get_place(self, place_id: str) -> dict:
        return self._get(f"{PLACE_DETAILS_PATH}/{place_id}", {"fields": PLACE_FIELDS})


def _photo_url(place: dict) -> str | None:
    photos = place.get("photos") or []
    if not photos:
        return None
    photo = photos[0]
    if not photo.get("prefix") or not photo.get("suffix"):
        return None
    return f"{photo['prefix']}original{photo['suffix']}"


def place_to_location_payload(place: dict) -> dict[str, Any]:
    """
    Map a Places API record to a location creation row.
    Coordinates are emitted as [longitude, latitude]; geocodes.main is required.
    """
    main = (place.get("geocodes") or {}).get("main") or {}
    if "latitude" not in main or "longitude" not in main:
        raise ValueError(f"place {place.get('fsq_id')} has no main geocode")
    return {
        "externalId": place.get("fsq_id"),
        "name": place.get("name"),
        "description": place.get("description") or "",
        "tags": [c.get("short_name") for c in place.get("categories") or [] if c.get("short_name")],
        "address": (place.get("location") or {}).get("formatted_address"),
        "coordinates": [main["longitude"], main["latitude"]],
        "imageUrl": _photo_url(place),
    }
