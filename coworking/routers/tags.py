"""Tag routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.tag import TagResponse
from ..services import tag_svc

router = APIRouter(tags=["tags"])


@router.get("/tags")
async def tag_list(db: AsyncSession = Depends(get_db)):
    tags = await tag_svc.list_tags(db)
    return {"data": [TagResponse.model_validate(t).model_dump() for t in tags]}
