"""Office model - the listing hosts publish and visitors reserve."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, func, select
from sqlalchemy.orm import Mapped, column_property, mapped_column, relationship

from .base import Base, IntIdMixin, SoftDeleteMixin, TimestampMixin
from .reservation import STATUS_ACTIVE, Reservation

APPROVAL_PENDING = "pending"
APPROVAL_APPROVED = "approved"
APPROVAL_REJECTED = "rejected"
APPROVAL_STATUSES = (APPROVAL_PENDING, APPROVAL_APPROVED, APPROVAL_REJECTED)

# Changing any of these sends an approved office back to review.
SENSITIVE_FIELDS = ("lat", "lng", "price_per_day")


class Office(IntIdMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "office"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    lat: Mapped[float] = mapped_column(Numeric(10, 7, asdecimal=False))
    lng: Mapped[float] = mapped_column(Numeric(10, 7, asdecimal=False))
    address_line1: Mapped[str] = mapped_column(String(255), default="")
    address_line2: Mapped[str | None] = mapped_column(String(255), default=None)
    price_per_day: Mapped[int] = mapped_column(Integer, default=0)
    monthly_discount: Mapped[int] = mapped_column(Integer, default=0)
    approval_status: Mapped[str] = mapped_column(
        String(20), default=APPROVAL_PENDING, index=True
    )
    hidden: Mapped[bool] = mapped_column(Boolean, default=False)
    featured_image_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("image.id", ondelete="SET NULL", use_alter=True, name="fk_office_featured_image"),
        default=None,
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="offices")  # noqa: F821
    images: Mapped[list["Image"]] = relationship(  # noqa: F821
        back_populates="office",
        foreign_keys="Image.office_id",
        order_by="Image.id",
    )
    reservations: Mapped[list["Reservation"]] = relationship(back_populates="office")
    tags: Mapped[list["Tag"]] = relationship(  # noqa: F821
        secondary="office_tag",
        order_by="OfficeTag.position",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Office {self.id} {self.title!r} ({self.approval_status})>"


# Loaded with every Office row; cancelled reservations are not counted.
Office.reservations_count = column_property(
    select(func.count(Reservation.id))
    .where(Reservation.office_id == Office.id, Reservation.status == STATUS_ACTIVE)
    .correlate_except(Reservation)
    .scalar_subquery()
)
