"""
Shared fixtures: in-memory SQLite store, ASGI client, users and session tokens.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import planner_server.main as main_module
import planner_server.models  # noqa: F401
from planner_server.core.config import get_settings
from planner_server.core.database import get_session
from planner_server.main import app
from planner_server.models.user import User

settings = get_settings()


def make_token(
    user_id: uuid.UUID,
    *,
    expires_in: timedelta = timedelta(hours=1),
    secret: str | None = None,
) -> str:
    """Mint a session JWT the way the external session provider would."""
    now = datetime.now(timezone.utc)
    payload = {"sub": str(user_id), "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, secret or settings.secret_key, algorithm=settings.jwt_algorithm)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user.id)}"}


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(engine, session_factory, monkeypatch):
    async def _override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _override_get_session
    monkeypatch.setattr(main_module, "engine", engine)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@pytest.fixture
def create_user(session_factory):
    async def _create(name: str = "user") -> User:
        async with session_factory() as session:
            user = User(email=f"{name}-{uuid.uuid4().hex[:8]}@example.com", name=name)
            session.add(user)
            await session.commit()
            return user

    return _create


@pytest.fixture
async def alice(create_user):
    return await create_user("alice")


@pytest.fixture
async def bob(create_user):
    return await create_user("bob")


@pytest.fixture
async def carol(create_user):
    return await create_user("carol")


@pytest.fixture
def create_org(client):
    """Create an org over the API as ``owner``; returns the response JSON."""

    async def _create(owner: User, name: str = "Acme") -> dict:
        resp = await client.post(
            "/api/v1/organizations", json={"name": name}, headers=auth_headers(owner)
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create


@pytest.fixture
def add_member(client):
    """Have ``admin`` add ``user`` to ``org_id`` with ``role`` over the API."""

    async def _add(admin: User, org_id: str, user: User, role: str = "MEMBER") -> dict:
        resp = await client.post(
            f"/api/v1/organizations/{org_id}/members",
            json={"user_id": str(user.id), "role": role},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _add
