"""Pytest configuration and shared fixtures."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from vistra.core.auth.backend import create_access_token
from vistra.core.database import Base, get_db
from vistra.core.permissions.catalog import PermissionCatalog
from vistra.core.permissions.models import (  # noqa: F401
    Permission,
    Role,
    RolePermission,
    UserPermission,
    UserRole,
)
from vistra.main import create_app

# Import all models to ensure they're registered with Base.metadata
from vistra.modules.activities.models import Activity  # noqa: F401
from vistra.modules.users.models import User
from tests.factories.user import UserFactory


# In-memory SQLite by default; point at PostgreSQL with
# TEST_DATABASE_URL=postgresql+asyncpg://.../vistra_test
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _create_engine():
    if not TEST_DATABASE_URL.startswith("sqlite"):
        return create_async_engine(TEST_DATABASE_URL, poolclass=NullPool, echo=False)

    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest.fixture(scope="function")
async def engine():
    """Create test database engine with a fresh schema."""
    engine = _create_engine()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db(engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a transactional database session for tests.

    Each test runs in its own transaction that is rolled back
    after the test completes, ensuring test isolation.
    """
    async with engine.connect() as conn:
        await conn.begin()

        session_factory = async_sessionmaker(
            bind=conn,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
            join_transaction_mode="create_savepoint",
        )
        async with session_factory() as session:
            yield session

        await conn.rollback()


@pytest.fixture
async def app(db: AsyncSession):
    """Create test application instance."""
    application = create_app()

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# User and Grant Fixtures
# ============================================================


@pytest.fixture
def make_user(db: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Return a coroutine that persists a user built by UserFactory."""

    async def _make_user(**kwargs) -> User:
        user = UserFactory.build(**kwargs)
        db.add(user)
        await db.flush()
        return user

    return _make_user


@pytest.fixture
def grant(db: AsyncSession) -> Callable[..., Awaitable[Role]]:
    """Return a coroutine that gives a user a fresh role holding ``names``."""

    async def _grant(user: User, *names: str) -> Role:
        catalog = PermissionCatalog(db)
        role = Role(name=f"role-{uuid4().hex[:8]}")
        db.add(role)
        await db.flush()

        for name in names:
            permission = await catalog.get_or_create_permission(name)
            db.add(RolePermission(role_id=role.id, permission_id=permission.id))

        db.add(UserRole(user_id=user.id, role_id=role.id))
        await db.flush()
        return role

    return _grant


@pytest.fixture
async def user(make_user) -> User:
    """A regular user with no grants."""
    return await make_user()


@pytest.fixture
def headers_for() -> Callable[[User], dict[str, str]]:
    """Return a function building Authorization headers for any user."""

    def _headers_for(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id=user.id)}"}

    return _headers_for


@pytest.fixture
def auth_headers(user: User, headers_for) -> dict[str, str]:
    """Authorization headers with a valid access token for ``user``."""
    return headers_for(user)
