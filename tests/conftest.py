"""Pytest configuration and shared fixtures.

Organization:
    - Database Fixtures: in-memory engine, session factory, seeded users
    - Notification Fixtures: stub executor, dispatcher, queue store
    - Application Fixtures: FastAPI app with overridden dependencies and client
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

# The process-wide engine is only touched by CLI tests; keep it off the
# working directory and out of any real database.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="taskboard-tests-")
os.environ.setdefault("DB_URL", f"sqlite+aiosqlite:///{_TEST_DB_DIR}/taskboard.db")
os.environ.setdefault("QUEUE_DRIVER", "database")
os.environ.setdefault("EMAIL_BACKEND", "console")
os.environ.setdefault("LOG_JSON_LOGS", "false")


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with every table created."""
    from taskboard.core.database import Base
    from taskboard.infra.database.session import _import_models

    _import_models()
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def make_user(session_factory: async_sessionmaker[AsyncSession]):
    """Factory persisting a user and returning it.

    Example:
        async def test_x(make_user):
            ada = await make_user("Ada", "ada@example.com")
    """
    from taskboard.features.users.models import User

    async def _make(name: str, email: str = "", *, is_admin: bool = False) -> User:
        async with session_factory() as session:
            user = User(name=name, email=email, is_admin=is_admin)
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


@pytest.fixture
async def admin(make_user):
    return await make_user("Admin User", "admin@example.com", is_admin=True)


@pytest.fixture
async def john(make_user):
    return await make_user("John Doe", "john@example.com")


@pytest.fixture
async def jane(make_user):
    return await make_user("Jane Smith", "jane@example.com")


@pytest.fixture
async def no_email_user(make_user):
    return await make_user("Nobody", "")


# ============================================================================
# Notification Fixtures
# ============================================================================


@pytest.fixture
def queue_store(session_factory: async_sessionmaker[AsyncSession]):
    from taskboard.infra.queue import QueueStore

    return QueueStore(session_factory)


@pytest.fixture
def executor() -> MagicMock:
    """Delivery executor whose attempts succeed unless reconfigured."""
    from taskboard.features.notifications.results import DeliveryResult

    stub = MagicMock()
    stub.attempt = AsyncMock(return_value=DeliveryResult.sent())
    return stub


@pytest.fixture
def fallback() -> MagicMock:
    stub = MagicMock()
    stub.notify_fallback = AsyncMock(return_value=None)
    return stub


@pytest.fixture
def sync_queue_settings():
    from taskboard.core.settings.queue import QueueSettings

    return QueueSettings(driver="sync")


@pytest.fixture
def email_settings():
    from taskboard.core.settings.email import EmailSettings

    return EmailSettings(backend="console", from_address="tasks@example.com", from_name="Taskboard")


@pytest.fixture
def make_dispatcher(executor, queue_store, fallback, email_settings, sync_queue_settings):
    """Build a DispatchService; defaults to inline delivery through ``executor``."""
    from taskboard.features.notifications.dispatch import DispatchService

    def _make(queue_settings=None, **overrides):
        kwargs = {
            "fallback": fallback,
            "queue_settings": queue_settings or sync_queue_settings,
            "email_settings": email_settings,
        }
        kwargs.update(overrides)
        return DispatchService(executor, queue_store, **kwargs)

    return _make


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(session_factory, make_dispatcher, queue_store):
    """FastAPI app wired to the in-memory database and stub executor."""
    from taskboard.app.main import create_app
    from taskboard.core.dependencies.database import get_db_session
    from taskboard.core.dependencies.notifications import (
        get_dispatch_service,
        get_queue_monitor,
    )
    from taskboard.features.queue_monitor.service import QueueMonitor

    application = create_app()

    async def _session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    monitor = QueueMonitor(queue_store, ttl=30)

    application.dependency_overrides[get_db_session] = _session
    application.dependency_overrides[get_dispatch_service] = lambda: make_dispatcher()
    application.dependency_overrides[get_queue_monitor] = lambda: monitor
    application.state.test_monitor = monitor
    return application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def as_user():
    """Identity header builder: ``headers=as_user(admin)``."""

    def _headers(user) -> dict[str, str]:
        return {"X-User-Id": str(user.id)}

    return _headers
