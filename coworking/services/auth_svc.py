"""Personal access token service - issue and resolve bearer tokens."""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.token import PersonalAccessToken
from ..models.user import User


def hash_token(token: str) -> str:
    return hashlib.sha256((token or "").encode("utf-8")).hexdigest()


def issue_plaintext_token() -> str:
    return secrets.token_urlsafe(40)


async def issue_token(
    db: AsyncSession,
    user: User,
    name: str,
    abilities: list[str] | None = None,
) -> tuple[PersonalAccessToken, str]:
    """Create a token for `user`. Returns (token_row, plaintext)."""
    plaintext = issue_plaintext_token()
    token = PersonalAccessToken(
        user_id=user.id,
        name=name,
        token_hash=hash_token(plaintext),
        abilities=list(abilities if abilities is not None else ["*"]),
    )
    db.add(token)
    await db.commit()
    await db.refresh(token)
    return token, plaintext


async def resolve_token(db: AsyncSession, plaintext: str) -> PersonalAccessToken | None:
    """Look up a token by plaintext, touching last_used_at. None if unknown."""
    if not plaintext:
        return None
    stmt = (
        select(PersonalAccessToken)
        .where(PersonalAccessToken.token_hash == hash_token(plaintext))
        .options(selectinload(PersonalAccessToken.user))
    )
    token = (await db.execute(stmt)).scalar_one_or_none()
    if not token:
        return None
    token.last_used_at = datetime.now(timezone.utc)
    await db.commit()
    return token


async def revoke_token(db: AsyncSession, token_id: int) -> bool:
    token = await db.get(PersonalAccessToken, token_id)
    if not token:
        return False
    await db.delete(token)
    await db.commit()
    return True
