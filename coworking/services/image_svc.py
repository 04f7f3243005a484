"""Office image service - uploads, removal and purge of stored files."""

from __future__ import annotations

import logging
import mimetypes
import secrets
from pathlib import PurePosixPath

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..assets.filestore import FileStorage, StorageError
from ..errors import ValidationFailed
from ..models.image import Image
from ..models.office import Office

logger = logging.getLogger(__name__)

IMAGE_DIR = "offices"


def _extension_for(filename: str | None, content_type: str) -> str:
    suffix = PurePosixPath(filename or "").suffix.lower()
    if suffix and len(suffix) <= 6:
        return suffix
    return mimetypes.guess_extension(content_type) or ""


async def list_images(db: AsyncSession, office_id: int) -> list[Image]:
    stmt = select(Image).where(Image.office_id == office_id).order_by(Image.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_office_image(db: AsyncSession, office_id: int, image_id: int) -> Image | None:
    stmt = select(Image).where(Image.id == image_id, Image.office_id == office_id)
    return (await db.execute(stmt)).scalar_one_or_none()


async def store_office_image(
    db: AsyncSession,
    office: Office,
    *,
    data: bytes,
    filename: str | None,
    content_type: str | None,
    storage: FileStorage,
    max_bytes: int,
) -> Image:
    """Validate and store an uploaded image, then record it against the office."""
    content_type = (content_type or "").lower()
    if not content_type.startswith("image/"):
        raise ValidationFailed.single("image", "The image must be an image.")
    if not data:
        raise ValidationFailed.single("image", "The image field is required.")
    if len(data) > max_bytes:
        raise ValidationFailed.single(
            "image", f"The image must not be greater than {max_bytes // 1024} kilobytes."
        )

    path = f"{IMAGE_DIR}/{secrets.token_hex(16)}{_extension_for(filename, content_type)}"
    storage.put_bytes(path, data)

    image = Image(office_id=office.id, path=path)
    db.add(image)
    await db.commit()
    await db.refresh(image)
    logger.info("Stored image %s for office %s at %s", image.id, office.id, path)
    return image


def _delete_file(storage: FileStorage, path: str) -> bool:
    """Remove a stored file. True once it is gone, even if it was already missing."""
    try:
        storage.delete(path)
    except (OSError, StorageError):
        logger.warning("Failed to delete stored file %s", path, exc_info=True)
        return False
    return True


async def delete_office_image(
    db: AsyncSession, office: Office, image: Image, storage: FileStorage
) -> None:
    """Remove one image. An office keeps at least one image and its featured image."""
    count_stmt = select(func.count(Image.id)).where(Image.office_id == office.id)
    if ((await db.execute(count_stmt)).scalar() or 0) <= 1:
        raise ValidationFailed.single("image", "Cannot delete the only image.")
    if office.featured_image_id == image.id:
        raise ValidationFailed.single("image", "Cannot delete the featured image.")

    path = image.path
    await db.delete(image)
    await db.commit()
    _delete_file(storage, path)


async def purge_office_images(db: AsyncSession, office_id: int, storage: FileStorage) -> int:
    """Irrevocably remove every stored file and image row of an office.

    Rows whose file could not be removed are kept so the purge can be retried.
    Returns how many images were purged.
    """
    images = await list_images(db, office_id)
    purged_ids = [image.id for image in images if _delete_file(storage, image.path)]

    await db.execute(
        update(Office).where(Office.id == office_id).values(featured_image_id=None)
    )
    if purged_ids:
        await db.execute(delete(Image).where(Image.id.in_(purged_ids)))
    await db.commit()

    kept = len(images) - len(purged_ids)
    if kept:
        logger.warning("Kept %d image row(s) of office %s for a later purge", kept, office_id)
    logger.info("Purged %d image(s) of office %s", len(purged_ids), office_id)
    return len(purged_ids)
