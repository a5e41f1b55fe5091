"""Fixtures for API unit tests: in-memory SQLite, seeded principals, AsyncClient."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from opsconsole.domain.models.user import User
from opsconsole.infrastructure.database import models  # noqa: F401
from opsconsole.infrastructure.database.session import Base, build_sessionmaker, get_db
from opsconsole.infrastructure.database.user_repository_db import DbUserRepository
from opsconsole.main import app
from opsconsole.security.roles import Role

PRINCIPALS = [
    User(id="a-1", email="ada@example.com", name="Ada", role=Role.ADMIN, department="IT"),
    User(id="m-eng", email="grace@example.com", name="Grace", role=Role.MANAGER, department="Engineering"),
    User(id="m-sales", email="mary@example.com", name="Mary", role=Role.MANAGER, department="Sales"),
    User(id="e-1", email="linus@example.com", name="Linus", role=Role.EMPLOYEE, department="Engineering"),
    User(id="e-2", email="ken@example.com", name="Ken", role=Role.EMPLOYEE, department="Engineering"),
    User(id="s-1", email="sam@example.com", name="Sam", role=Role.EMPLOYEE, department="Sales"),
    User(id="e-off", email="gone@example.com", name="Gone", role=Role.EMPLOYEE, department="Engineering",
         is_active=False),
]


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with build_sessionmaker(engine)() as session:
        repo = DbUserRepository(session)
        for user in PRINCIPALS:
            await repo.add(user)
    yield engine
    await engine.dispose()


@pytest.fixture
def app_with_overrides(engine):
    """App with the database session bound to the in-memory engine."""
    sessionmaker = build_sessionmaker(engine)

    async def override_get_db():
        async with sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def as_user():
    """Headers identifying the caller by principal id."""

    def headers(principal_id: str) -> dict:
        return {"X-Principal-ID": principal_id}

    return headers
