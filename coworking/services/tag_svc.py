"""Tag service - reference data and ordered office tag membership."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ValidationFailed
from ..models.tag import OfficeTag, Tag


async def list_tags(db: AsyncSession) -> list[Tag]:
    stmt = select(Tag).order_by(Tag.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_tag(db: AsyncSession, name: str) -> Tag:
    tag = Tag(name=name)
    db.add(tag)
    await db.commit()
    await db.refresh(tag)
    return tag


async def ensure_tags_exist(db: AsyncSession, tag_ids: list[int]) -> list[int]:
    """Return tag_ids de-duplicated in given order; raise if any id is unknown."""
    ordered = list(dict.fromkeys(tag_ids))
    if not ordered:
        return ordered
    stmt = select(Tag.id).where(Tag.id.in_(ordered))
    found = set((await db.execute(stmt)).scalars().all())
    missing = [tag_id for tag_id in ordered if tag_id not in found]
    if missing:
        raise ValidationFailed.single(
            "tags", f"The selected tags are invalid: {', '.join(str(m) for m in missing)}."
        )
    return ordered


async def replace_office_tags(db: AsyncSession, office_id: int, tag_ids: list[int]) -> None:
    """Replace an office's tag set with tag_ids, keeping their order. Does not commit."""
    await db.execute(delete(OfficeTag).where(OfficeTag.office_id == office_id))
    for position, tag_id in enumerate(tag_ids):
        db.add(OfficeTag(office_id=office_id, tag_id=tag_id, position=position))


async def attach_tag(db: AsyncSession, office_id: int, tag_id: int) -> bool:
    """Append a tag to an office. Returns False if already attached."""
    stmt = select(OfficeTag).where(OfficeTag.office_id == office_id, OfficeTag.tag_id == tag_id)
    if (await db.execute(stmt)).scalar_one_or_none():
        return False
    positions = (
        await db.execute(select(OfficeTag.position).where(OfficeTag.office_id == office_id))
    ).scalars().all()
    db.add(OfficeTag(office_id=office_id, tag_id=tag_id, position=max(positions, default=-1) + 1))
    await db.commit()
    return True
