"""
Shared test fixtures and utilities for the test suite.

This module provides fixtures for database sessions, a controllable clock,
workspace setup, access tokens and an HTTP client bound to the app.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-launchline-tests")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("POSTHOG_DISABLED", "true")

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable, Optional
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from launchline.core.analytics import AnalyticsClient, get_analytics_client
from launchline.core.database import get_db_session
from launchline.core.models import generate_id
from launchline.core.rate_limiting import rate_limiter
from launchline.core.security import create_access_token
from launchline.models import Base
from launchline.modules.auth.schemas import AuthContext, UserRole
from launchline.modules.workspace.models import (
    Workspace,
    WorkspaceMemberRole,
    WorkspaceMemberStatus,
    WorkspaceMembership,
)
from launchline.modules.workspace.service import WorkspaceService

# Test database URL for in-memory SQLite
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

FROZEN_NOW = datetime(2026, 3, 2, 9, 30, 15, 250000, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FROZEN_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={
            "check_same_thread": False,
        },
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def analytics() -> MagicMock:
    """Analytics client double recording captures."""
    return MagicMock(spec=AnalyticsClient)


@pytest.fixture
def workspace_service(db_session, analytics, clock) -> WorkspaceService:
    return WorkspaceService(db_session, analytics, now=clock)


@pytest.fixture
def make_workspace(db_session, clock) -> Callable:
    """Factory creating a workspace with one active member."""

    async def _make_workspace(
        name: str = "Acme",
        user_id: Optional[str] = None,
        role: WorkspaceMemberRole = WorkspaceMemberRole.ADMIN,
        email: Optional[str] = "admin@acme.com",
    ) -> tuple[Workspace, WorkspaceMembership]:
        now = clock()
        workspace = Workspace(id=generate_id(), name=name, created_at=now, updated_at=now)
        membership = WorkspaceMembership(
            id=generate_id(),
            workspace_id=workspace.id,
            user_id=user_id or generate_id(),
            role=role,
            status=WorkspaceMemberStatus.ACTIVE,
            email=email,
            full_name="Ada Admin",
            created_at=now,
            updated_at=now,
        )
        db_session.add_all([workspace, membership])
        await db_session.commit()
        return workspace, membership

    return _make_workspace


@pytest_asyncio.fixture
async def admin_workspace(make_workspace):
    """Workspace with an active admin member."""
    return await make_workspace()


@pytest.fixture
def admin_auth(admin_workspace) -> AuthContext:
    _, membership = admin_workspace
    return AuthContext(
        user_id=membership.user_id,
        role=UserRole.WORKSPACE_ADMIN,
        email=membership.email,
        name=membership.full_name,
    )


def make_token(user_id: str, role: UserRole, **claims) -> str:
    return create_access_token({"sub": user_id, "role": role.value, **claims})


def auth_headers(user_id: str, role: UserRole) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def test_app(session_factory, analytics):
    """FastAPI application wired to the test database."""
    from main import create_application

    app = create_application()

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_analytics_client] = lambda: analytics
    return app


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
