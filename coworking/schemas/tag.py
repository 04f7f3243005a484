"""Tag schemas."""

from __future__ import annotations

from pydantic import BaseModel


class TagResponse(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}
