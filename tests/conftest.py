"""Shared test fixtures for the ESG API test suite."""

import os

# Settings are read once at import; these must be set before esg_api loads
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production-use-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE_AUTO_CREATE", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from esg_api.core.database import build_engine, get_db, init_db
from esg_api.core.security import create_access_token, hash_password
from esg_api.main import app
from esg_api.models.core import User
from esg_api.models.esg import ESGResponse
from esg_api.modules.esg.calculator import calculate_metrics

SAMPLE_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
OTHER_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000099")
SAMPLE_PASSWORD = "correct-horse"

BASE_TIME = datetime(2024, 4, 1, 9, 30, tzinfo=timezone.utc)

SAMPLE_RAW = {
    "total_electricity_consumption": 1000.0,
    "renewable_electricity_consumption": 250.0,
    "total_fuel_consumption": 120.0,
    "carbon_emissions": 50.0,
    "total_employees": 100.0,
    "female_employees": 40.0,
    "avg_training_hours_per_employee": 12.5,
    "community_investment_spend": 5000.0,
    "independent_board_members_percent": 60.0,
    "has_data_privacy_policy": True,
    "total_revenue": 500000.0,
}


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database per test; StaticPool keeps one shared connection."""
    eng = build_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient]:
    async def _override_get_db() -> AsyncGenerator[AsyncSession]:
        try:
            yield db
        except Exception:
            await db.rollback()
            raise

    app.dependency_overrides[get_db] = _override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


# ── Sample data fixtures ──────────────────────────────────────────────────


async def _make_user(db: AsyncSession, user_id: uuid.UUID, email: str, name: str) -> User:
    user = User(
        id=user_id,
        email=email,
        full_name=name,
        password_hash=hash_password(SAMPLE_PASSWORD),
        is_active=True,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def sample_user(db: AsyncSession) -> User:
    return await _make_user(db, SAMPLE_USER_ID, "asha@example.com", "Asha Rao")


@pytest.fixture
async def other_user(db: AsyncSession) -> User:
    return await _make_user(db, OTHER_USER_ID, "other@example.com", "Other Person")


@pytest.fixture
def auth_headers(sample_user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(sample_user.id))}"}


@pytest.fixture
def other_auth_headers(other_user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(other_user.id))}"}


async def make_response(
    db: AsyncSession,
    user: User,
    financial_year: str,
    *,
    age_days: int = 0,
    **overrides,
) -> ESGResponse:
    """Insert a response directly, created ``age_days`` before BASE_TIME."""
    raw = {**SAMPLE_RAW, **overrides}
    response = ESGResponse(
        user_id=user.id,
        financial_year=financial_year,
        created_at=BASE_TIME - timedelta(days=age_days),
        **raw,
        **calculate_metrics(raw).as_dict(),
    )
    db.add(response)
    await db.commit()
    return response
