"""
Pytest configuration and shared fixtures.

Tests run against an in-memory SQLite database through aiosqlite. A single
connection is shared (``StaticPool``) so every session sees the same data.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from marketing_api.auth.jwt import TokenService
from marketing_api.auth.models import User, UserRole
from marketing_api.auth.passwords import PasswordHasher
from marketing_api.auth.repository import UserRepository
from marketing_api.auth.service import AccountService
from marketing_api.campaigns.repository import CampaignRepository
from marketing_api.campaigns.service import CampaignService
from marketing_api.config import Settings
from marketing_api.main import create_app
from marketing_api.shared.database import Base, get_db_session

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        app_env="development",
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-for-testing-only-0123456789",
        jwt_algorithm="HS256",
        token_duration_minutes=60,
        bcrypt_rounds=4,
        cors_origins="http://localhost:3000",
    )


@pytest_asyncio.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with all tables."""
    engine = create_async_engine(
        test_settings.database_url,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    session_factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
def password_hasher(test_settings: Settings) -> PasswordHasher:
    return PasswordHasher(test_settings)


@pytest.fixture
def token_service(test_settings: Settings) -> TokenService:
    return TokenService(test_settings)


@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def campaign_repository(db_session: AsyncSession) -> CampaignRepository:
    return CampaignRepository(db_session)


@pytest.fixture
def account_service(
    user_repository: UserRepository,
    password_hasher: PasswordHasher,
    token_service: TokenService,
) -> AccountService:
    """Create account service over the test database."""
    return AccountService(
        user_repository=user_repository,
        password_hasher=password_hasher,
        token_service=token_service,
    )


@pytest.fixture
def campaign_service(campaign_repository: CampaignRepository) -> CampaignService:
    return CampaignService(campaign_repository)


async def _create_user(
    session: AsyncSession,
    hasher: PasswordHasher,
    email: str,
    full_name: str,
    role: UserRole,
) -> User:
    user = User(
        full_name=full_name,
        email=email,
        password_hash=hasher.hash(TEST_PASSWORD),
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession, password_hasher: PasswordHasher) -> User:
    """Create a user with the standard role."""
    return await _create_user(
        db_session, password_hasher, "member@example.com", "Member User", UserRole.USER
    )


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession, password_hasher: PasswordHasher) -> User:
    """Create a second standard user."""
    return await _create_user(
        db_session, password_hasher, "other@example.com", "Other User", UserRole.USER
    )


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession, password_hasher: PasswordHasher) -> User:
    """Create an administrator."""
    return await _create_user(
        db_session, password_hasher, "admin@example.com", "Admin User", UserRole.ADMIN
    )


def _token_for(token_service: TokenService, user: User) -> str:
    return token_service.issue(subject_id=user.id, email=user.email, role=user.role.value)


@pytest.fixture
def user_token(token_service: TokenService, test_user: User) -> str:
    return _token_for(token_service, test_user)


@pytest.fixture
def other_token(token_service: TokenService, other_user: User) -> str:
    return _token_for(token_service, other_user)


@pytest.fixture
def admin_token(token_service: TokenService, admin_user: User) -> str:
    return _token_for(token_service, admin_user)


@pytest.fixture
def user_headers(user_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_token}"}


@pytest.fixture
def other_headers(other_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {other_token}"}


@pytest.fixture
def admin_headers(admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def campaign_payload() -> dict[str, Any]:
    """Valid campaign creation body."""
    return {
        "title": "Spring Launch",
        "description": "Paid social push for the spring collection",
        "start_date": "2026-03-01T00:00:00Z",
        "end_date": "2026-03-31T23:59:59Z",
        "budget": 2500.0,
    }


@pytest.fixture
def app(test_settings: Settings) -> Any:
    """Create the application with test settings."""
    return create_app(test_settings)


@pytest_asyncio.fixture
async def async_client(
    app: Any,
    db_session: AsyncSession,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client whose requests share the test session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db_session
            await db_session.commit()
        except BaseException:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db_session] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
