"""Office service - listing, lookup, create/update/delete with approval rules."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..assets.filestore import FileStorage
from ..errors import ValidationFailed
from ..geo import haversine
from ..models.image import Image
from ..models.office import APPROVAL_APPROVED, APPROVAL_PENDING, SENSITIVE_FIELDS, Office
from ..models.reservation import Reservation
from ..models.tag import OfficeTag
from ..models.user import User
from . import approval_svc, image_svc, reservation_svc, tag_svc
from .notification_svc import NotificationGateway

logger = logging.getLogger(__name__)


def _load_options():
    return (
        selectinload(Office.user),
        selectinload(Office.tags),
        selectinload(Office.images),
    )


def _filtered_query(
    *,
    viewer_id: int | None,
    user_id: int | None,
    visitor_id: int | None,
    tag_ids: list[int] | None,
):
    stmt = select(Office).where(Office.deleted_at.is_(None))

    # Hosts browsing their own listings also see hidden and unapproved ones.
    if user_id is None or viewer_id != user_id:
        stmt = stmt.where(
            Office.hidden.is_(False),
            Office.approval_status == APPROVAL_APPROVED,
        )

    if user_id is not None:
        stmt = stmt.where(Office.user_id == user_id)

    if visitor_id is not None:
        stmt = stmt.where(
            exists().where(
                Reservation.office_id == Office.id,
                Reservation.user_id == visitor_id,
            )
        )

    for tag_id in dict.fromkeys(tag_ids or []):
        stmt = stmt.where(
            exists().where(OfficeTag.office_id == Office.id, OfficeTag.tag_id == tag_id)
        )

    return stmt


async def list_offices(
    db: AsyncSession,
    *,
    viewer_id: int | None = None,
    user_id: int | None = None,
    visitor_id: int | None = None,
    tag_ids: list[int] | None = None,
    lat: float | None = None,
    lng: float | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Office], int]:
    """List visible offices for one page. Returns (offices, total).

    With both lat and lng the page is taken from the distance ordering,
    otherwise from id order.
    """
    stmt = _filtered_query(
        viewer_id=viewer_id, user_id=user_id, visitor_id=visitor_id, tag_ids=tag_ids
    )
    offset = (max(page, 1) - 1) * per_page

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    if lat is None or lng is None:
        page_stmt = stmt.options(*_load_options()).order_by(Office.id).offset(offset).limit(per_page)
        result = await db.execute(page_stmt)
        return list(result.scalars().all()), total

    coords_stmt = stmt.with_only_columns(Office.id, Office.lat, Office.lng)
    rows = (await db.execute(coords_stmt)).all()
    ranked = sorted(rows, key=lambda r: (haversine(lng, lat, float(r.lng), float(r.lat)), r.id))
    page_ids = [r.id for r in ranked[offset:offset + per_page]]
    if not page_ids:
        return [], total

    result = await db.execute(
        select(Office).where(Office.id.in_(page_ids)).options(*_load_options())
    )
    by_id = {office.id: office for office in result.scalars().all()}
    return [by_id[office_id] for office_id in page_ids if office_id in by_id], total


async def get_office(
    db: AsyncSession, office_id: int, *, include_deleted: bool = False
) -> Office | None:
    """Get a single office with user, tags and images loaded, ignoring visibility."""
    stmt = (
        select(Office)
        .where(Office.id == office_id)
        .options(*_load_options())
        .execution_options(populate_existing=True)
    )
    if not include_deleted:
        stmt = stmt.where(Office.deleted_at.is_(None))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_office(
    db: AsyncSession,
    owner: User,
    data: dict[str, Any],
    gateway: NotificationGateway,
) -> Office:
    """Create a pending office owned by `owner` and ask admins to review it."""
    fields = dict(data)
    tag_ids = await tag_svc.ensure_tags_exist(db, fields.pop("tags", None) or [])
    fields.pop("approval_status", None)
    fields.pop("user_id", None)

    office = Office(user_id=owner.id, approval_status=APPROVAL_PENDING, **fields)
    db.add(office)
    await db.flush()
    await tag_svc.replace_office_tags(db, office.id, tag_ids)
    await db.commit()
    logger.info("Office %s created by user %s", office.id, owner.id)

    await approval_svc.notify_admins(db, office, gateway)
    return await get_office(db, office.id)


async def _validate_featured_image(db: AsyncSession, office: Office, image_id: int | None) -> None:
    if image_id is None:
        return
    image = await db.get(Image, image_id)
    if not image or image.office_id != office.id:
        raise ValidationFailed.single(
            "featured_image_id", "The selected featured image id is invalid."
        )


def requires_review(office: Office, changes: dict[str, Any]) -> bool:
    """True if `changes` give any sensitive field a new value."""
    return any(
        field in changes and changes[field] != getattr(office, field)
        for field in SENSITIVE_FIELDS
    )


async def update_office(
    db: AsyncSession,
    office: Office,
    changes: dict[str, Any],
    gateway: NotificationGateway,
) -> Office:
    """Apply a partial update. Every check runs before the first attribute is set."""
    fields = dict(changes)
    tag_ids = fields.pop("tags", None)
    if tag_ids is not None:
        tag_ids = await tag_svc.ensure_tags_exist(db, tag_ids)
    if "featured_image_id" in fields:
        await _validate_featured_image(db, office, fields["featured_image_id"])

    review = requires_review(office, fields)
    for key, value in fields.items():
        setattr(office, key, value)
    if review:
        approval_svc.mark_pending(office)
    if tag_ids is not None:
        await tag_svc.replace_office_tags(db, office.id, tag_ids)
    await db.commit()

    if review:
        changed = sorted(set(fields) & set(SENSITIVE_FIELDS))
        logger.info("Office %s changed %s, back to review", office.id, changed)
        await approval_svc.notify_admins(db, office, gateway)
    return await get_office(db, office.id)


async def soft_delete_office(db: AsyncSession, office: Office) -> Office:
    office.deleted_at = datetime.now(timezone.utc)
    await db.commit()
    return office


async def delete_office(db: AsyncSession, office: Office, storage: FileStorage) -> None:
    """Soft delete the office, then purge its image files. Blocked by any reservation."""
    if await reservation_svc.office_has_reservations(db, office.id):
        raise ValidationFailed.single("office", "Cannot delete this office!")

    await soft_delete_office(db, office)
    logger.info("Office %s soft deleted", office.id)
    await image_svc.purge_office_images(db, office.id, storage)
