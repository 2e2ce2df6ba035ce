"""Configuration from environment."""
import os

PORT = int(os.environ.get("PORT", "8001"))

# When TESTING=true, use test DB URL so tests never touch production.
if os.environ.get("TESTING") == "true":
    DATABASE_URL = os.environ.get("TESTING_DATABASE_URL", "sqlite:///:memory:")
else:
    DATABASE_URL = os.environ.get(
        "DATABASE_URL",
        "sqlite:///./catalog.db",
    )

FOURSQUARE_API_URL = os.environ.get("FOURSQUARE_API_URL", "https://api.foursquare.com")
FOURSQUARE_API_KEY = os.environ.get("FOURSQUARE_API_KEY", "")
FOURSQUARE_TIMEOUT_S = float(os.environ.get("FOURSQUARE_TIMEOUT_S", "10"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "http://localhost:8080,http://127.0.0.1:8080").split(",")
    if origin.strip()
]

# Seed random demo locations on startup when the catalog is empty.
SEED_DEMO_DATA = os.environ.get("SEED_DEMO_DATA", "false").lower() == "true"
SEED_DEMO_COUNT = int(os.environ.get("SEED_DEMO_COUNT", "200"))

# Apply Alembic migrations when the app starts (tests build tables themselves).
RUN_MIGRATIONS = os.environ.get("RUN_MIGRATIONS", "true").lower() == "true"
