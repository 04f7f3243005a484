"""Notification gateway - fans approval events out to administrators."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.notification import Notification
from . import user_svc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OfficePendingApproval:
    office_id: int
    title: str
    user_id: int

    type = "office_pending_approval"

    def to_data(self) -> dict:
        return asdict(self)


class NotificationGateway(Protocol):
    async def notify_admins(self, db: AsyncSession, event: OfficePendingApproval) -> int:
        """Deliver one notification per admin user. Returns how many were sent."""
        ...


class DatabaseNotificationGateway:
    """Stores one Notification row per admin user."""

    async def notify_admins(self, db: AsyncSession, event: OfficePendingApproval) -> int:
        admins = await user_svc.list_admins(db)
        for admin in admins:
            db.add(Notification(user_id=admin.id, type=event.type, data=event.to_data()))
        await db.commit()
        logger.info(
            "Sent %s for office %s to %d admin(s)", event.type, event.office_id, len(admins)
        )
        return len(admins)


_default_gateway = DatabaseNotificationGateway()


def get_notification_gateway() -> NotificationGateway:
    """FastAPI dependency returning the active notification gateway."""
    return _default_gateway


async def list_notifications(
    db: AsyncSession, user_id: int, *, type: str | None = None
) -> list[Notification]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if type:
        stmt = stmt.where(Notification.type == type)
    result = await db.execute(stmt.order_by(Notification.id))
    return list(result.scalars().all())
