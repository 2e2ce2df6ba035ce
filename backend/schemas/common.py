"""Response envelope, pagination and field types shared by every endpoint."""
from datetime import datetime, timezone
from typing import Annotated, Any, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field

from catalog_core.query_planner import parse_coordinates

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """{success, message, data}; data is null on failure."""

    success: bool = True
    message: str = ""
    data: T | None = None


class Page(BaseModel, Generic[T]):
    """One page of a list endpoint."""

    total: int
    limit: int
    offset: int
    results: list[T]


def error_body(message: str) -> dict[str, Any]:
    """Failure envelope as a plain dict (for exception handlers)."""
    return {"success": False, "message": message, "data": None}


def to_utc_iso(value: datetime) -> str:
    """Stored naive-UTC datetime as ISO-8601 with a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _coordinates(value: Any) -> list[float]:
    return parse_coordinates(value).as_list()


def _reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("must not be null")
    return value


def _non_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


def _split_tags(value: Any) -> Any:
    """Tags may arrive as a list or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    return value


# [lng, lat] within bounds; JSON text "[lng, lat]" is accepted too.
Coordinates = Annotated[list[float], BeforeValidator(_coordinates)]
NonBlankStr = Annotated[str, AfterValidator(_non_blank)]
Tags = Annotated[list[str], BeforeValidator(_split_tags)]
# Wraps an Optional field: may be omitted, may not be sent as null.
NotNull = BeforeValidator(_reject_null)

Name = Annotated[str, Field(min_length=1, max_length=255), AfterValidator(_non_blank)]
# JSON numbers only: "5" or true are rejected rather than coerced.
Rating = Annotated[float, Field(ge=0, le=5, strict=True)]
