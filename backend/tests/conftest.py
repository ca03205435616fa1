"""Pytest configuration and fixtures for ability tests.

Integration tests run against in-memory SQLite (aiosqlite). The host's
authentication is replaced by an `X-User-Id` header read in an override of
`get_current_user_id`.
"""

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field

import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI, Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from abilities.auth.deps import (
    RequestAbilities,
    get_abilities,
    get_current_user_id,
    require_abilities,
)
from abilities.database import Base, get_db
from abilities.main import create_app
from abilities.models import User
from abilities.services.grants import add_user_role, grant_role_action, grant_user_action


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    """In-memory SQLite engine with all ability tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


# ── Test App ─────────────────────────────────────────────────────

def build_test_app() -> FastAPI:
    """The abilities app plus a few host routes guarded by abilities."""
    app = create_app()

    @app.post("/posts/{post_id}/delete")
    async def delete_post(post_id: int, user: User = Depends(require_abilities("delete_post"))):
        return {"post_id": post_id, "deleted_by": user.id}

    @app.post("/posts/moderate")
    async def moderate(user: User = Depends(require_abilities("edit_post", "delete_post"))):
        return {"moderator": user.id}

    @app.get("/posts/{post_id}")
    async def view_post(
        post_id: int,
        abilities: RequestAbilities = Depends(get_abilities),
    ):
        return {
            "post_id": post_id,
            "can_edit": abilities.check_user_ability("edit_post"),
        }

    return app


async def header_user_id(request: Request) -> int | None:
    raw = request.headers.get("X-User-Id")
    return int(raw) if raw else None


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Test client with database and current-user dependencies overridden."""
    app = build_test_app()

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_id] = header_user_id

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

async def _create_user(db: AsyncSession, user_id: int, username: str) -> User:
    user = User(id=user_id, username=username, actions=[], roles=[])
    db.add(user)
    await db.flush()
    return user


@pytest_asyncio.fixture
async def super_user(db_session: AsyncSession) -> User:
    """User 1: the default super-user, with no grants at all."""
    return await _create_user(db_session, 1, "installer")


@pytest_asyncio.fixture
async def editor(db_session: AsyncSession) -> User:
    """Member of 'editor' (edit_post, delete_post); no direct actions."""
    user = await _create_user(db_session, 2, "editor01")
    role = await add_user_role(db_session, user, "editor")
    await grant_role_action(db_session, role, "edit_post")
    await grant_role_action(db_session, role, "delete_post")
    return user


@pytest_asyncio.fixture
async def writer(db_session: AsyncSession) -> User:
    """Holds create_post and delete_post directly; no roles."""
    user = await _create_user(db_session, 3, "writer01")
    await grant_user_action(db_session, user, "create_post")
    await grant_user_action(db_session, user, "delete_post")
    return user


# ── In-memory doubles ────────────────────────────────────────────

@dataclass
class FakeAction:
    name: str


@dataclass
class FakeRole:
    name: str
    actions: list = field(default_factory=list)


@dataclass
class FakeUser:
    id: int
    actions: list = field(default_factory=list)
    roles: list = field(default_factory=list)


@pytest.fixture
def make_user():
    """Factory for users that satisfy UserLike without a database.

    make_user(user_id=5, direct=["a"], roles={"editor": ["b", "c"]})
    """
    def _make(user_id=42, direct=(), roles=None):
        roles = roles or {}
        return FakeUser(
            id=user_id,
            actions=[FakeAction(n) for n in direct],
            roles=[FakeRole(r, [FakeAction(n) for n in acts]) for r, acts in roles.items()],
        )

    return _make


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
