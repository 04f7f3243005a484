"""Personal access tokens (bearer auth with abilities)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IntIdMixin, TimestampMixin

WILDCARD_ABILITY = "*"


class PersonalAccessToken(IntIdMixin, TimestampMixin, Base):
    """Hashed bearer token; the plaintext is only shown once at issue time."""

    __tablename__ = "personal_access_token"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    abilities: Mapped[list] = mapped_column(JSON, default=list)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    user: Mapped["User"] = relationship(back_populates="tokens")  # noqa: F821

    def can(self, ability: str) -> bool:
        granted = self.abilities or []
        return WILDCARD_ABILITY in granted or ability in granted

    def __repr__(self) -> str:
        return f"<PersonalAccessToken {self.name!r} user={self.user_id}>"
