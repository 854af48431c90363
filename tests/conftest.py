"""
Shared test fixtures for the FUPA attendance test suite.

Async throughout: a fresh in-memory aiosqlite database per test, httpx
AsyncClient over ASGI, and dependency overrides for the DB session, the
clock and the media store.
"""

import os
import sys
import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fupa.api.v1.deps import get_clock, get_db, get_media_store
from fupa.api.v1.endpoints.auth import limiter
from fupa.core.security import create_access_token, hash_password
from fupa.db.base import Base
from fupa.main import app
from fupa.models.user import User
from fupa.services.media import MediaRef

WIB = timezone(timedelta(hours=7))

# Login rate limiting would leak state between tests
limiter.enabled = False

_state: dict[str, async_sessionmaker] = {}


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """A fresh in-memory database with all tables, wired into the app."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    _state["factory"] = factory
    yield factory

    _state.pop("factory", None)
    await engine.dispose()


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with _state["factory"]() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


# ── Clock ───────────────────────────────────────────────────────────
class FrozenClock:
    """Callable clock whose time tests move by hand."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    """Wednesday 2026-10-14 07:30 WIB, injected as the app's clock."""
    frozen = FrozenClock(datetime(2026, 10, 14, 7, 30, tzinfo=WIB))
    app.dependency_overrides[get_clock] = lambda: frozen
    yield frozen
    app.dependency_overrides.pop(get_clock, None)


# ── Media store ─────────────────────────────────────────────────────
class FakeMediaStore:
    def __init__(self) -> None:
        self.uploads: list[tuple[str, bytes, str]] = []
        self.deleted: list[str | None] = []
        self.delete_succeeds = True

    async def upload(self, content: bytes, filename: str, content_type: str) -> MediaRef:
        self.uploads.append((filename, content, content_type))
        n = len(self.uploads)
        return MediaRef(
            url=f"https://res.cloudinary.com/fupa-snack/image/upload/attendance/p{n}.jpg",
            public_id=f"attendance/p{n}",
        )

    async def soft_delete(self, public_id: str | None) -> bool:
        self.deleted.append(public_id)
        return bool(public_id) and self.delete_succeeds


@pytest.fixture
def media():
    fake = FakeMediaStore()
    app.dependency_overrides[get_media_store] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_media_store, None)


# ── Users & auth ────────────────────────────────────────────────────
@pytest.fixture
def make_user(session_factory):
    async def _make(
        role: str = "employee",
        email: str | None = None,
        name: str = "Budi",
        password: str = "secret123",
        is_active: bool = True,
    ) -> User:
        user = User(
            uid=uuid.uuid4().hex,
            email=email or f"{uuid.uuid4().hex[:8]}@fupa.test",
            hashed_password=hash_password(password),
            name=name,
            role=role,
            is_active=is_active,
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
            await session.refresh(user)
        return user

    return _make


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.uid, user.role)}"}


@pytest.fixture
async def admin(make_user) -> User:
    return await make_user(role="admin", email="admin@fupa.test", name="Admin")


@pytest.fixture
async def employee(make_user) -> User:
    return await make_user(role="employee", email="budi@fupa.test", name="Budi")


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return bearer(admin)


@pytest.fixture
def employee_headers(employee) -> dict[str, str]:
    return bearer(employee)


@pytest.fixture
def headers_for():
    """Authorization headers for any user created in a test."""
    return bearer
