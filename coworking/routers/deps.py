"""FastAPI dependencies for resolving offices and request bodies."""

from __future__ import annotations

from typing import TypeVar

from fastapi import Depends, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import ValidationFailed
from ..models.office import Office
from ..security.auth import AuthContext, ensure_owner, get_auth
from ..services import office_svc

ModelT = TypeVar("ModelT", bound=BaseModel)


async def get_office_or_404(
    office_id: int,
    db: AsyncSession = Depends(get_db),
) -> Office:
    office = await office_svc.get_office(db, office_id)
    if not office:
        raise HTTPException(status_code=404, detail="Office not found")
    return office


async def get_owned_office(
    auth: AuthContext = Depends(get_auth),
    office: Office = Depends(get_office_or_404),
) -> Office:
    """Authenticated caller, existing office, caller owns it - in that order."""
    ensure_owner(office, auth)
    return office


def json_body(model: type[ModelT]):
    """Dependency factory parsing the JSON request body into `model`.

    Dependencies resolve in declaration order, so routes list this one after
    their auth dependencies and a bad body never masks a 401/403/404.
    """

    async def _dep(request: Request) -> ModelT:
        try:
            payload = await request.json()
        except ValueError:
            raise ValidationFailed.single(
                "body", "The request body must be valid JSON."
            ) from None
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise RequestValidationError(exc.errors(include_url=False)) from None

    return _dep
