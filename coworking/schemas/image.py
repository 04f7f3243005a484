"""Image schemas."""

from __future__ import annotations

from pydantic import BaseModel


class ImageResponse(BaseModel):
    id: int
    path: str

    model_config = {"from_attributes": True}
