"""Points-of-interest catalog: FastAPI backend."""
import logging
import os
import subprocess
import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
LOG = logging.getLogger(__name__)

from api.images import router as images_router
from api.import_api import router as import_router
from api.locations import router as locations_router
from api.reviews import router as reviews_router
from api.routes import router
from db import session_scope
from schemas.common import error_body
from utils.config import CORS_ORIGINS, PORT, RUN_MIGRATIONS, SEED_DEMO_COUNT, SEED_DEMO_DATA
from utils.seed import seed_demo_locations

app = FastAPI(
    title="POI Catalog",
    description="Searchable catalog of geotagged points of interest with user reviews",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")
app.include_router(locations_router, prefix="/api")
app.include_router(reviews_router, prefix="/api")
app.include_router(images_router, prefix="/api")
app.include_router(import_router, prefix="/api")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors in the {success, message, data} envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body/parameter validation failures are 400s, described by their first error."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid input: {field}: {first.get('msg')}" if field else f"Invalid input: {first.get('msg')}"
    else:
        message = "Invalid input"
    return JSONResponse(status_code=400, content=error_body(message))


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Storage failures: log the detail, tell the caller nothing about it."""
    LOG.exception("Storage error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


@app.on_event("startup")
def startup() -> None:
    """Run DB migrations and optionally seed demo data."""
    if RUN_MIGRATIONS:
        backend_dir = os.path.dirname(os.path.abspath(__file__))
        result = subprocess.run(
            [sys.executable, "-m", "alembic", "upgrade", "head"],
            cwd=backend_dir,
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise RuntimeError(f"Alembic upgrade failed: {result.stderr or result.stdout}")
    if SEED_DEMO_DATA:
        with session_scope() as db:
            seed_demo_locations(db, SEED_DEMO_COUNT)


@app.get("/")
def root() -> dict:
    """Root redirect/info."""
    return {"service": "poi-catalog", "docs": "/docs", "health": "/api/health"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)
