"""Validate location rows coming from file uploads and third-party imports."""
from typing import Any

from catalog_core.query_planner import InvalidParameterError, parse_coordinates


def _get_str(row: dict[str, Any], key: str) -> str | None:
    """Get string value; empty string treated as missing."""
    v = row.get(key)
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None


def _get_tags(row: dict[str, Any]) -> list[str] | None:
    """Tags as a list, or a comma-separated string (CSV). None if the shape is wrong."""
    v = row.get("tags")
    if v is None:
        return []
    if isinstance(v, str):
        return [t.strip() for t in v.split(",") if t.strip()]
    if isinstance(v, list) and all(isinstance(t, str) for t in v):
        return [t for t in v if t.strip()]
    return None


def _get_coordinates(row: dict[str, Any]):
    """[lng, lat] from a coordinates field (list or JSON text) or from lng/lat columns."""
    if row.get("coordinates") is not None:
        return parse_coordinates(row["coordinates"])
    lng, lat = row.get("lng"), row.get("lat")
    if lng is None or lat is None:
        raise InvalidParameterError("coordinates are required")
    try:
        pair = [float(lng), float(lat)]
    except (TypeError, ValueError):
        raise InvalidParameterError("lng and lat must be numeric") from None
    return parse_coordinates(pair)


def validate_location_row(row: dict[str, Any]) -> tuple[bool, dict[str, Any] | None, str]:
    """
    Validate a location row. Returns (ok, normalized_dict, error_message).
    normalized_dict holds keyword arguments for create_location.
    """
    name = _get_str(row, "name")
    if not name:
        return False, None, "name is required"
    if len(name) > 255:
        return False, None, "name must be at most 255 characters"
    try:
        position = _get_coordinates(row)
    except InvalidParameterError as e:
        return False, None, str(e)
    tags = _get_tags(row)
    if tags is None:
        return False, None, "tags must be a list of strings or a comma-separated string"

    normalized = {
        "name": name,
        "position": position,
        "address": _get_str(row, "address"),
        "description": _get_str(row, "description"),
        "tags": tags,
        "image_url": _get_str(row, "imageUrl"),
    }
    return True, normalized, ""
