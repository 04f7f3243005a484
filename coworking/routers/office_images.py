"""Office image routes - upload and remove listing photos."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ..assets.filestore import FileStorage, get_storage
from ..config import settings
from ..database import get_db
from ..models.office import Office
from ..schemas.image import ImageResponse
from ..services import image_svc
from .deps import get_owned_office

router = APIRouter(prefix="/offices/{office_id}/images", tags=["office-images"])


@router.post("", status_code=201)
async def office_image_store(
    image: UploadFile = File(...),
    office: Office = Depends(get_owned_office),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    # One byte past the limit is enough to reject an oversized upload
    data = await image.read(settings.max_image_bytes + 1)
    stored = await image_svc.store_office_image(
        db,
        office,
        data=data,
        filename=image.filename,
        content_type=image.content_type,
        storage=storage,
        max_bytes=settings.max_image_bytes,
    )
    return {"data": ImageResponse.model_validate(stored).model_dump()}


@router.delete("/{image_id}")
async def office_image_delete(
    image_id: int,
    office: Office = Depends(get_owned_office),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    image = await image_svc.get_office_image(db, office.id, image_id)
    if not image:
        raise HTTPException(status_code=404, detail="Image not found")
    await image_svc.delete_office_image(db, office, image, storage)
    return {"message": "Image deleted"}
