"""
Shared test fixtures and configuration for pytest.
"""

from typing import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.api.dependencies import get_db
from app.core.settings_service import initialize_token_counter
from app.db.base import Base
from app.main import app
from app.models.user_model import User, UserRole
from app.repositories.user_repo import UserRepository


@pytest.fixture
async def test_engine(tmp_path):
    """
    Engine on a throwaway SQLite file.

    A file (rather than ``:memory:``) lets several sessions share the same
    database, which the token concurrency tests rely on.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'clinic.db'}", echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Fresh database session for each test, with the token counter row in
    place the way application startup leaves it.
    """
    async with session_factory() as session:
        await initialize_token_counter(session)
        yield session


@pytest.fixture
async def bare_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session on a database whose token counter was never initialized."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def override_get_db(db_session: AsyncSession):
    """Override the get_db dependency for testing."""

    async def _override_get_db():
        yield db_session

    return _override_get_db


@pytest.fixture
async def client(override_get_db) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the database dependency pointed at the test database."""
    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def doctor(db_session: AsyncSession) -> User:
    """An active doctor."""
    return await UserRepository(db_session).create_user(
        User(name="Dr. Sana Malik", email="sana.malik@clinic.pk", role=UserRole.DOCTOR)
    )


@pytest.fixture
async def nurse(db_session: AsyncSession) -> User:
    return await UserRepository(db_session).create_user(
        User(name="Rabia Aslam", email="rabia.aslam@clinic.pk", role=UserRole.NURSE)
    )


@pytest.fixture
def registration_payload() -> Callable[..., dict]:
    """
    Build a valid registration form; keyword arguments replace fields.

    The default patient registers under their own CNIC.
    """

    def _build(**overrides) -> dict:
        payload = {
            "name": "Ayesha Khan",
            "father_name": "Imran Khan",
            "email": "ayesha.khan@gmail.com",
            "identity": "PAKISTANI",
            "cnic": "35202-1234567-1",
            "crc": "NEW",
            "crc_number": "CRC-1001",
            "contact_number": "03001234567",
            "education": "Graduate",
            "age": 28,
            "marriage_years": 3,
            "occupation": "Teacher",
            "address": "12 Mall Road, Lahore",
            "catchment_area": "URBAN",
            "amount_paid": "500.00",
            "relation": [{"relation": "NONE"}],
        }
        payload.update(overrides)
        return payload

    return _build


@pytest.fixture
def relation_entry() -> Callable[..., dict]:
    def _build(**overrides) -> dict:
        entry = {
            "relation": "PARENT",
            "relation_name": "Shazia Bibi",
            "relation_cnic": "35202-7654321-2",
        }
        entry.update(overrides)
        return entry

    return _build


# Helper functions for tests
def assert_failure(body: dict, field: str) -> None:
    """Assert an action result failed with an error on ``field``."""
    assert body["success"] is False
    assert body["data"] is None
    assert field in body["error"]
    assert body["error"][field]
