"""User service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User


async def create_user(
    db: AsyncSession, *, name: str, email: str, is_admin: bool = False
) -> User:
    user = User(name=name, email=email.strip().lower(), is_admin=is_admin)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def list_admins(db: AsyncSession) -> list[User]:
    stmt = select(User).where(User.is_admin.is_(True)).order_by(User.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())
