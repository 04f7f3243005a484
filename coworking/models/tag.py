"""Tag model with ordered M2M office relationship."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IntIdMixin, TimestampMixin


class OfficeTag(Base):
    """M2M join table for offices <-> tags, keeping the order tags were given in."""

    __tablename__ = "office_tag"

    office_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("office.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)


class Tag(IntIdMixin, TimestampMixin, Base):
    __tablename__ = "tag"

    name: Mapped[str] = mapped_column(String(100), unique=True)

    def __repr__(self) -> str:
        return f"<Tag {self.name!r}>"
