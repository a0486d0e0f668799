"""Pytest configuration for all tests."""

from datetime import timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from usermanagement.core.config import Settings
from usermanagement.infrastructure.api.app import create_app
from usermanagement.infrastructure.auth import (
    SecretOrigin,
    TokenIssuer,
    TokenTrustSettings,
)
from usermanagement.infrastructure.persistence.database import Base, get_db_session
from usermanagement.infrastructure.persistence.models import UserModel  # noqa: F401

TEST_SECRET = "unit-test-signing-secret-0123456789abcdef"


@pytest.fixture
def settings() -> Settings:
    """Settings for an isolated test application."""
    return Settings(
        _env_file=None,
        environment="testing",
        database_url="sqlite+aiosqlite:///:memory:",
        seed_database=False,
        log_format="console",
    )


@pytest.fixture
def token_settings() -> TokenTrustSettings:
    return TokenTrustSettings(
        signing_secret=TEST_SECRET.encode("utf-8"),
        secret_origin=SecretOrigin.ENVIRONMENT_VARIABLE,
    )


@pytest.fixture
def issuer(token_settings: TokenTrustSettings) -> TokenIssuer:
    return TokenIssuer.from_trust_settings(token_settings)


@pytest.fixture
def access_token(issuer: TokenIssuer) -> str:
    return issuer.create_access_token(subject="1", name="testuser")


@pytest.fixture
def auth_headers(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def expired_token(issuer: TokenIssuer) -> str:
    return issuer.create_access_token(subject="1", expires_delta=timedelta(hours=-1))


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory over a fresh in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(
    settings: Settings,
    token_settings: TokenTrustSettings,
    session_factory: async_sessionmaker[AsyncSession],
) -> FastAPI:
    """Application wired to the in-memory test database."""
    application = create_app(settings, token_settings)

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db_session] = override_get_db_session
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
