"""Reservation model - bookings made by visitors against an office."""

from __future__ import annotations

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IntIdMixin, TimestampMixin

STATUS_ACTIVE = "active"
STATUS_CANCELLED = "cancelled"
RESERVATION_STATUSES = (STATUS_ACTIVE, STATUS_CANCELLED)


class Reservation(IntIdMixin, TimestampMixin, Base):
    __tablename__ = "reservation"

    office_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("office.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), index=True
    )
    price: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ACTIVE, index=True)
    start_date: Mapped[date | None] = mapped_column(Date, default=None)
    end_date: Mapped[date | None] = mapped_column(Date, default=None)

    # Relationships
    office: Mapped["Office"] = relationship(back_populates="reservations")  # noqa: F821
    user: Mapped["User"] = relationship(back_populates="reservations")  # noqa: F821

    def __repr__(self) -> str:
        return f"<Reservation office={self.office_id} user={self.user_id} {self.status}>"
