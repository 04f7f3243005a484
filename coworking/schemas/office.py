"""Office schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from .image import ImageResponse
from .tag import TagResponse

COORDINATE_PLACES = 7


class OfficeCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    address_line1: str = Field(min_length=1, max_length=255)
    address_line2: str | None = None
    price_per_day: int = Field(ge=100)
    monthly_discount: int = Field(default=0, ge=0, le=90)
    hidden: bool = False
    tags: list[int] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("lat", "lng")
    @classmethod
    def _round_coordinate(cls, value: float) -> float:
        return round(value, COORDINATE_PLACES)


class OfficeUpdate(BaseModel):
    """Partial update; only the keys the client sent are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    address_line1: str | None = Field(default=None, min_length=1, max_length=255)
    address_line2: str | None = None
    price_per_day: int | None = Field(default=None, ge=100)
    monthly_discount: int | None = Field(default=None, ge=0, le=90)
    hidden: bool | None = None
    tags: list[int] | None = None
    featured_image_id: int | None = None

    model_config = {"extra": "ignore"}

    @field_validator(
        "title", "description", "lat", "lng", "address_line1",
        "price_per_day", "monthly_discount", "hidden", "tags",
    )
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("This field may not be null.")
        return value

    @field_validator("lat", "lng")
    @classmethod
    def _round_coordinate(cls, value: float) -> float:
        return round(value, COORDINATE_PLACES)


class UserSummary(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class OfficeResponse(BaseModel):
    id: int
    title: str
    description: str
    lat: float
    lng: float
    address_line1: str
    address_line2: str | None = None
    price_per_day: int
    monthly_discount: int
    approval_status: str
    hidden: bool
    featured_image_id: int | None = None
    reservations_count: int = 0
    user: UserSummary
    tags: list[TagResponse]
    images: list[ImageResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
