"""Pytest fixtures for testing."""

from typing import AsyncGenerator, Awaitable, Callable
from uuid import uuid4

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fair_scoring.auth.api_keys import generate_api_key
from fair_scoring.db.session import get_db
from fair_scoring.main import app
from fair_scoring.models import Base
from fair_scoring.models.user import User
from fair_scoring.scoring.records import UserRole

# In-memory SQLite shared by every connection of the test engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

UserFactory = Callable[..., Awaitable[tuple[User, str]]]


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> UserFactory:
    """Factory creating a user directly in the database; returns (user, api_key)."""

    async def _make(role: UserRole, name: str | None = None, **fields) -> tuple[User, str]:
        api_key, key_hash = generate_api_key()
        name = name or f"{role.value} {uuid4().hex[:6]}"
        user = User(
            id=uuid4(),
            name=name,
            email=f"{uuid4().hex[:10]}@example.org",
            role=role,
            api_key_hash=key_hash,
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user, api_key

    return _make


@pytest_asyncio.fixture
async def sub_county_admin(make_user: UserFactory) -> tuple[User, str]:
    return await make_user(
        UserRole.SUB_COUNTY_ADMIN,
        name="Mathira Admin",
        region="Central",
        county="Nyeri",
        sub_county="Mathira",
    )


@pytest_asyncio.fixture
async def patron(make_user: UserFactory) -> tuple[User, str]:
    return await make_user(UserRole.PATRON, name="Patron", school="Alpha School")


@pytest_asyncio.fixture
async def coordinator(make_user: UserFactory) -> tuple[User, str]:
    return await make_user(
        UserRole.COORDINATOR, name="Physics Coordinator", coordinated_category="Physics"
    )


@pytest_asyncio.fixture
async def judges(make_user: UserFactory) -> list[tuple[User, str]]:
    """Two judges from a school that has no projects in the tests."""
    return [
        await make_user(UserRole.JUDGE, name="Judge One", school="Outside School"),
        await make_user(UserRole.JUDGE, name="Judge Two", school="Outside School"),
    ]
