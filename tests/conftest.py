import dataclasses
import os
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Settings are read on import, configure the environment first
os.environ["TESTING"] = "1"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_DOMAIN", "http://test")

from autologin.core.auth import require_admin  # noqa: E402
from autologin.core.database import get_db  # noqa: E402
from autologin.main import app  # noqa: E402
from autologin.models import Base  # noqa: E402
from autologin.models.user import User  # noqa: E402
from autologin.repositories.unit_of_work import SqlAlchemyUnitOfWork  # noqa: E402
from autologin.services.autologin_service import AutologinService  # noqa: E402
from autologin.services.interfaces import AutologinConfig  # noqa: E402
from autologin.services.link_builder import StarletteLinkBuilder  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = None):
        self.now = now or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest_asyncio.fixture
async def async_engine():
    """Create an async engine for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(async_engine):
    """Create an async session for testing."""
    async_session_maker = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def override_get_db(async_session):
    """Override the get_db dependency."""

    async def _override_get_db():
        try:
            yield async_session
            await async_session.commit()
        except Exception:
            await async_session.rollback()
            raise

    return _override_get_db


@pytest_asyncio.fixture
async def client(override_get_db):
    """Create test client with overridden database."""
    from httpx import ASGITransport

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_client(client, admin_user):
    """Test client whose requests are authenticated as an admin."""

    async def _require_admin():
        return admin_user.id

    app.dependency_overrides[require_admin] = _require_admin
    return client


@pytest_asyncio.fixture
async def user(async_session):
    """Create a regular active user."""
    user = User(id=42, email="user@example.com", is_active=True, is_admin=False)
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(async_session):
    """Create an admin user."""
    user = User(email="admin@example.com", is_active=True, is_admin=True)
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def autologin_config():
    """Configuration used by the service tests."""
    return AutologinConfig(
        length=10,
        lifetime_minutes=60,
        remove_expired_on_issue=True,
        count_redemptions=True,
        redemption_route_name="autologin",
    )


@pytest.fixture
def link_builder():
    return StarletteLinkBuilder(app, "http://test")


@pytest.fixture
def make_service(async_session, link_builder, clock, autologin_config):
    """Build an AutologinService on the test session, optionally overriding config fields."""

    def _make_service(**overrides):
        config = dataclasses.replace(autologin_config, **overrides)
        return AutologinService(SqlAlchemyUnitOfWork(async_session), link_builder, config, clock=clock)

    return _make_service


@pytest.fixture
def autologin_service(make_service):
    return make_service()