"""Image API routes: resolve an image reference to its external URL."""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from db import get_db
from repositories.image_repository import get_image

router = APIRouter(prefix="/images", tags=["images"])


@router.get("/{image_id}", response_class=RedirectResponse, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
def get_image_by_id(image_id: str, db: Session = Depends(get_db)) -> RedirectResponse:
    """Redirect to the externally hosted image."""
    image = get_image(db, image_id)
    if image is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")
    return RedirectResponse(url=image.url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
