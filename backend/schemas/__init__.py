# Schemas package
from .common import Envelope, Page
from .health import HealthResponse
from .locations import LocationCreate, LocationResponse, LocationUpdate
from .reviews import ReviewCreate, ReviewResponse, ReviewUpdate

__all__ = [
    "Envelope",
    "HealthResponse",
    "LocationCreate",
    "LocationResponse",
    "LocationUpdate",
    "Page",
    "ReviewCreate",
    "ReviewResponse",
    "ReviewUpdate",
]
