"""FastAPI application for the coworking offices API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from .config import settings
from .errors import ValidationFailed, request_validation_handler, validation_failed_handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Auto-create tables for SQLite (local dev); PostgreSQL uses Alembic migrations
    if "sqlite" in settings.database_url:
        from .database import engine
        from .models import Base
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    yield


app = FastAPI(title=settings.app_title, lifespan=lifespan)

app.add_exception_handler(ValidationFailed, validation_failed_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# Import and register routers
from .routers import health, office_images, offices, tags  # noqa: E402

app.include_router(offices.router)
app.include_router(office_images.router)
app.include_router(tags.router)
app.include_router(health.router)
