# tests/conftest.py — Shared test fixtures
import os

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Use SQLite for tests
TEST_DB_URL = "sqlite+aiosqlite:///./test.db"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-unit-tests-only-min-32-chars"
os.environ["ENVIRONMENT"] = "test"

from models import Base, User, Task
from auth import AuthService
from database import get_db_session
from main import app


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    engine = create_async_engine(TEST_DB_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine):
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(db_engine):
    """HTTP test client with overridden DB dependency"""
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _make_user(db_session, name: str, email: str, password: str) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=AuthService.hash_password(password),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user(db_session):
    """Create a test user"""
    return await _make_user(db_session, "Test User", "testuser@todo.dev", "TestPassword123")


@pytest_asyncio.fixture
async def other_user(db_session):
    """Create a second user who owns nothing of test_user's"""
    return await _make_user(db_session, "Other User", "other@todo.dev", "OtherPassword123")


@pytest_asyncio.fixture
async def legacy_task(db_session):
    """A task created before ownership existed"""
    task = Task(title="Legacy chore", description="No owner recorded", done=False, user_id=None)
    db_session.add(task)
    await db_session.commit()
    await db_session.refresh(task)
    return task


def get_auth_headers(user: User) -> dict:
    """Generate auth headers for a user"""
    token = AuthService.issue_token(user)["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return get_auth_headers
