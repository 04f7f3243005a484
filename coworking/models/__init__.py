"""Coworking models - re-exports all models and Base.metadata."""

from .base import Base, IntIdMixin, TimestampMixin, SoftDeleteMixin
from .user import User
from .token import PersonalAccessToken
from .tag import Tag, OfficeTag
from .image import Image
from .reservation import Reservation
from .office import Office
from .notification import Notification

__all__ = [
    "Base",
    "IntIdMixin",
    "TimestampMixin",
    "SoftDeleteMixin",
    "User",
    "PersonalAccessToken",
    "Tag",
    "OfficeTag",
    "Image",
    "Reservation",
    "Office",
    "Notification",
]
