"""Async test fixtures for coworking tests using SQLite."""

from __future__ import annotations

import itertools

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from coworking.assets.filestore import FileStorage, get_storage
from coworking.database import get_db
from coworking.models.base import Base
from coworking.models.office import APPROVAL_APPROVED, Office
from coworking.models.reservation import STATUS_ACTIVE
from coworking.services import auth_svc, reservation_svc, tag_svc, user_svc


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    return FileStorage(tmp_path / "storage")


@pytest_asyncio.fixture
async def client(engine, storage):
    """HTTPX async test client against the coworking app."""
    from coworking.app import app

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_user(db: AsyncSession):
    counter = itertools.count(1)

    async def _make(**kwargs):
        n = next(counter)
        kwargs.setdefault("name", f"User {n}")
        kwargs.setdefault("email", f"user{n}@example.com")
        return await user_svc.create_user(db, **kwargs)

    return _make


@pytest.fixture
def make_tag(db: AsyncSession):
    counter = itertools.count(1)

    async def _make(name: str | None = None):
        return await tag_svc.create_tag(db, name or f"tag-{next(counter)}")

    return _make


def office_payload(**overrides) -> dict:
    """Attributes for a public, approved office listing."""
    payload = {
        "title": "Sunny desk by the river",
        "description": "Quiet coworking space with fast wifi.",
        "lat": 38.7223,
        "lng": -9.1393,
        "address_line1": "Rua Augusta 1",
        "address_line2": None,
        "price_per_day": 1500,
        "monthly_discount": 0,
        "approval_status": APPROVAL_APPROVED,
        "hidden": False,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_office(db: AsyncSession, make_user):
    async def _make(user=None, **overrides):
        owner = user or await make_user()
        office = Office(user_id=owner.id, **office_payload(**overrides))
        db.add(office)
        await db.commit()
        await db.refresh(office)
        return office

    return _make


@pytest.fixture
def make_reservation(db: AsyncSession, make_user, make_office):
    async def _make(office=None, user=None, status: str = STATUS_ACTIVE):
        office = office or await make_office()
        visitor = user or await make_user()
        return await reservation_svc.create_reservation(
            db, office_id=office.id, user_id=visitor.id, status=status, price=1500
        )

    return _make


@pytest.fixture
def make_image(db: AsyncSession, storage: FileStorage):
    async def _make(office, path: str = "image.png", data: bytes | None = None):
        from coworking.models.image import Image

        if data is not None:
            storage.put_bytes(path, data)
        image = Image(office_id=office.id, path=path)
        db.add(image)
        await db.commit()
        await db.refresh(image)
        return image

    return _make


@pytest.fixture
def login(db: AsyncSession):
    """Issue a token for `user` and return the Authorization header."""

    async def _login(user, abilities: list[str] | None = None) -> dict[str, str]:
        _, plaintext = await auth_svc.issue_token(db, user, "test", abilities)
        return {"Authorization": f"Bearer {plaintext}"}

    return _login
