import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from messenger.database import create_tables, get_db
from messenger.main import app
from messenger.repositories.user_repository import UserRepository
from messenger.schemas.user import UserCreate


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def make_user(db):
    user_repo = UserRepository(db)

    async def _make_user(login, password="password123", phone="555-0100"):
        return await user_repo.create(UserCreate(login=login, password=password, phone=phone))

    return _make_user


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def signup(client):
    """Register a user through the API and return bearer headers for it."""

    async def _signup(login, password="password123"):
        response = await client.post(
            "/api/v1/auth/register",
            json={"login": login, "password": password, "phone": "555-0100"},
        )
        assert response.status_code == 201, response.text
        response = await client.post(
            "/api/v1/auth/login-json", json={"login": login, "password": password}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _signup
