"""Office image model; bytes live in FileStorage under `path`."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IntIdMixin, TimestampMixin


class Image(IntIdMixin, TimestampMixin, Base):
    __tablename__ = "image"

    office_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("office.id", ondelete="CASCADE"), index=True
    )
    path: Mapped[str] = mapped_column(String(500))

    office: Mapped["Office"] = relationship(  # noqa: F821
        back_populates="images", foreign_keys=[office_id]
    )

    def __repr__(self) -> str:
        return f"<Image {self.path!r}>"
