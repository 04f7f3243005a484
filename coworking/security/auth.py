"""Bearer token authentication + ability and ownership policies."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.office import Office
from ..models.token import PersonalAccessToken
from ..models.user import User
from ..services import auth_svc

ABILITY_OFFICE_CREATE = "office.create"


@dataclass(frozen=True)
class AuthContext:
    user: User
    token: PersonalAccessToken

    def can(self, ability: str) -> bool:
        return self.token.can(ability)


def _extract_bearer(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return ""


async def get_optional_auth(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthContext | None:
    """Resolve the caller if a valid token is presented; never raises."""
    token = await auth_svc.resolve_token(db, _extract_bearer(request))
    if not token:
        return None
    return AuthContext(user=token.user, token=token)


async def get_auth(
    auth: AuthContext | None = Depends(get_optional_auth),
) -> AuthContext:
    if auth is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return auth


def require_ability(ability: str):
    """FastAPI dependency factory: the caller's token must grant `ability`."""

    async def _dep(auth: AuthContext = Depends(get_auth)) -> AuthContext:
        if not auth.can(ability):
            raise HTTPException(status_code=403, detail="Forbidden")
        return auth

    return _dep


def ensure_owner(office: Office, auth: AuthContext) -> None:
    """Only the office's host may change it."""
    if office.user_id != auth.user.id:
        raise HTTPException(status_code=403, detail="Forbidden")
