"""User model (office hosts, visitors and admins)."""

from __future__ import annotations

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IntIdMixin, TimestampMixin


class User(IntIdMixin, TimestampMixin, Base):
    __tablename__ = "user"

    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)

    # Relationships
    offices: Mapped[list["Office"]] = relationship(back_populates="user")  # noqa: F821
    reservations: Mapped[list["Reservation"]] = relationship(  # noqa: F821
        back_populates="user"
    )
    tokens: Mapped[list["PersonalAccessToken"]] = relationship(  # noqa: F821
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User {self.email!r}{' (admin)' if self.is_admin else ''}>"
