"""
ReportDesk Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file database (aiosqlite) with the full
       schema, a fresh app from create_app() whose session dependency points
       at that database, and helpers to mint users and bearer tokens.

Fixture Hierarchy (all function-scoped):
    db_engine ─┬─ session_factory ─┬─ db_session
               │                   ├─ make_user / user / admin
               │                   └─ app ── test_client
               └─ (health check engine)
    mock_db_session: AsyncMock session for pure service unit tests
"""

import os
import tempfile
from typing import AsyncGenerator, Callable, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before anything imports reportdesk.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="reportdesk_test_"), "unused.db"
)
os.environ["JWT_SECRET"] = "test-secret-for-reportdesk"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTH_RATE_LIMIT_REQUESTS"] = "100000"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["FRONTEND_DIR"] = ""

from reportdesk import database  # noqa: E402
from reportdesk.database import build_engine, build_session_factory, create_all_tables  # noqa: E402
from reportdesk.models.user import Role, User  # noqa: E402
from reportdesk.security import create_access_token, hash_password  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'reportdesk.db'}")
    await create_all_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A MagicMock standing in for AsyncSession.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = report
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# User Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_user(session_factory) -> Callable:
    """
    Insert a user directly (bypassing the API) and return it.

    Usage:
        bob = await make_user("bob", role=Role.ADMIN)
    """
    async def _make_user(
        username: str,
        password: str = "password1",
        role: Role = Role.USER,
        email: str = None,
    ) -> User:
        async with session_factory() as session:
            user = User(
                username=username,
                email=email or f"{username}@example.com",
                password_hash=hash_password(password),
                role=role.value,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make_user


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def headers_for() -> Callable[[User], Dict[str, str]]:
    return auth_headers


@pytest_asyncio.fixture
async def user(make_user) -> User:
    return await make_user("regular")


@pytest_asyncio.fixture
async def other_user(make_user) -> User:
    return await make_user("another")


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user("boss", role=Role.ADMIN)


@pytest.fixture
def user_headers(user) -> Dict[str, str]:
    return auth_headers(user)


@pytest.fixture
def other_headers(other_user) -> Dict[str, str]:
    return auth_headers(other_user)


@pytest.fixture
def admin_headers(admin) -> Dict[str, str]:
    return auth_headers(admin)


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory, db_engine, monkeypatch):
    """A fresh app (own rate-limit state) bound to the per-test database."""
    from reportdesk.main import create_app

    application = create_app()

    async def override_get_db_session() -> AsyncGenerator:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[database.get_db_session] = override_get_db_session
    # /health probes the module-level engine
    monkeypatch.setattr(database, "engine", db_engine)
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    raise_app_exceptions=False lets tests observe the 500 envelope instead
    of the exception re-raised by the transport.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
