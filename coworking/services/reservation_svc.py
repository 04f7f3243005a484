"""Reservation service - ledger lookups used by offices."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.reservation import STATUS_ACTIVE, Reservation


async def create_reservation(
    db: AsyncSession,
    *,
    office_id: int,
    user_id: int,
    status: str = STATUS_ACTIVE,
    price: int = 0,
    start_date: date | None = None,
    end_date: date | None = None,
) -> Reservation:
    reservation = Reservation(
        office_id=office_id,
        user_id=user_id,
        status=status,
        price=price,
        start_date=start_date,
        end_date=end_date,
    )
    db.add(reservation)
    await db.commit()
    await db.refresh(reservation)
    return reservation


async def office_has_reservations(db: AsyncSession, office_id: int) -> bool:
    """True if the office has any reservation, whatever its status."""
    stmt = select(Reservation.id).where(Reservation.office_id == office_id).limit(1)
    return (await db.execute(stmt)).first() is not None
