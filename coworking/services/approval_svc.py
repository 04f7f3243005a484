"""Approval workflow - send offices back to review and tell the admins."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.office import APPROVAL_PENDING, APPROVAL_STATUSES, Office
from .notification_svc import NotificationGateway, OfficePendingApproval

logger = logging.getLogger(__name__)


def mark_pending(office: Office) -> None:
    office.approval_status = APPROVAL_PENDING


async def notify_admins(
    db: AsyncSession, office: Office, gateway: NotificationGateway
) -> int:
    """Dispatch OfficePendingApproval to every admin.

    Runs after the office change is committed. Gateway failures are logged and
    swallowed so the committed change stands.
    """
    event = OfficePendingApproval(office_id=office.id, title=office.title, user_id=office.user_id)
    try:
        return await gateway.notify_admins(db, event)
    except Exception:
        logger.exception("Failed to notify admins about office %s", office.id)
        await db.rollback()
        return 0


async def set_status(db: AsyncSession, office: Office, status: str) -> Office:
    """Admin decision on a pending office (approved / rejected / pending)."""
    if status not in APPROVAL_STATUSES:
        raise ValueError(f"Unknown approval status: {status!r}")
    office.approval_status = status
    await db.commit()
    await db.refresh(office)
    logger.info("Office %s marked %s", office.id, status)
    return office
