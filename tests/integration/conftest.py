"""Pytest configuration for integration tests."""

import pytest_asyncio

from usermanagement.infrastructure.persistence.database import seed_default_users


@pytest_asyncio.fixture
async def seeded(db_session) -> int:
    """Seed Alice (id 1) and Bob (id 2)."""
    return await seed_default_users(db_session)
