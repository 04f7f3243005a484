"""Office routes - list, show, create, update, delete."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..assets.filestore import FileStorage, get_storage
from ..config import settings
from ..database import get_db
from ..models.office import Office
from ..schemas.office import OfficeCreate, OfficeResponse, OfficeUpdate
from ..schemas.pagination import paginate
from ..security.auth import (
    ABILITY_OFFICE_CREATE,
    AuthContext,
    get_optional_auth,
    require_ability,
)
from ..services import office_svc
from ..services.notification_svc import NotificationGateway, get_notification_gateway
from .deps import get_office_or_404, get_owned_office, json_body

router = APIRouter(prefix="/offices", tags=["offices"])


def serialize_office(office: Office) -> dict:
    return OfficeResponse.model_validate(office).model_dump(mode="json")


@router.get("")
async def office_list(
    request: Request,
    user_id: int | None = None,
    visitor_id: int | None = None,
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    tags: list[int] = Query(default=[]),
    page: int = Query(default=1, ge=1),
    auth: AuthContext | None = Depends(get_optional_auth),
    db: AsyncSession = Depends(get_db),
):
    per_page = settings.offices_per_page
    offices, total = await office_svc.list_offices(
        db,
        viewer_id=auth.user.id if auth else None,
        user_id=user_id,
        visitor_id=visitor_id,
        tag_ids=tags,
        lat=lat,
        lng=lng,
        page=page,
        per_page=per_page,
    )
    return paginate(
        [serialize_office(o) for o in offices],
        total=total,
        page=page,
        per_page=per_page,
        url=request.url,
    )


@router.get("/{office_id}")
async def office_show(office: Office = Depends(get_office_or_404)):
    return {"data": serialize_office(office)}


@router.post("", status_code=201)
async def office_create(
    auth: AuthContext = Depends(require_ability(ABILITY_OFFICE_CREATE)),
    data: OfficeCreate = Depends(json_body(OfficeCreate)),
    db: AsyncSession = Depends(get_db),
    gateway: NotificationGateway = Depends(get_notification_gateway),
):
    office = await office_svc.create_office(db, auth.user, data.model_dump(), gateway)
    return {"data": serialize_office(office)}


@router.put("/{office_id}")
async def office_update(
    office: Office = Depends(get_owned_office),
    data: OfficeUpdate = Depends(json_body(OfficeUpdate)),
    db: AsyncSession = Depends(get_db),
    gateway: NotificationGateway = Depends(get_notification_gateway),
):
    updated = await office_svc.update_office(
        db, office, data.model_dump(exclude_unset=True), gateway
    )
    return {"data": serialize_office(updated)}


@router.delete("/{office_id}")
async def office_delete(
    office: Office = Depends(get_owned_office),
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    await office_svc.delete_office(db, office, storage)
    return {"message": "Office deleted"}
