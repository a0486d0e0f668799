"""Database abstraction layer using SQLAlchemy 2.0 async.

This module provides the database session management and engine configuration
for SQLAlchemy with async support. It supports both SQLite (aiosqlite) and
PostgreSQL (asyncpg) drivers.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from usermanagement.core.config import Settings, get_settings
from usermanagement.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class DatabaseManager:
    """Database connection and session manager.

    This class manages the async database engine and session factory.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the database manager."""
        self.settings = settings or get_settings()
        self._engine = None
        self._session_factory = None

    @property
    def engine(self):
        """Get or create the database engine.

        Returns:
            AsyncEngine: SQLAlchemy async engine instance.
        """
        if self._engine is None:
            self._engine = create_async_engine(
                self.settings.database_url,
                echo=self.settings.db_echo,
                connect_args={
                    "check_same_thread": False,
                }
                if self.settings.database_url.startswith("sqlite")
                else {},
            )
            logger.info(
                "Database engine created",
                database_url=self._engine.url.render_as_string(hide_password=True),
            )
        return self._engine

    @property
    def session_factory(self):
        """Get or create the session factory.

        Returns:
            async_sessionmaker: SQLAlchemy async session factory.
        """
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
            logger.debug("Database session factory created")
        return self._session_factory

    async def create_tables(self) -> None:
        """Create all database tables that don't exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created")

    async def disconnect(self) -> None:
        """Close the database engine and all connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope for database operations.

        Yields:
            AsyncSession: SQLAlchemy async session.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        """Check if database connection is working.

        Returns:
            bool: True if connection is successful, False otherwise.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error("Database connection check failed", error=str(e))
            return False


_db_manager: DatabaseManager | None = None


def configure_database(settings: Settings) -> DatabaseManager:
    """Replace the global database manager with one built from settings."""
    global _db_manager
    _db_manager = DatabaseManager(settings)
    return _db_manager


def get_db_manager() -> DatabaseManager:
    """Get the global database manager instance."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI to get database session.

    Yields:
        AsyncSession: SQLAlchemy async session.
    """
    db = get_db_manager()
    async with db.session() as session:
        yield session


async def init_database(db: DatabaseManager | None = None) -> None:
    """Initialize the database on application startup.

    Creates tables that don't exist and seeds the initial users when
    seeding is enabled.
    """
    from usermanagement.infrastructure.persistence.models import UserModel  # noqa: F401

    db = db or get_db_manager()
    settings = db.settings

    if settings.database_url.startswith("sqlite") and ":memory:" not in settings.database_url:
        # Extract path from sqlite+aiosqlite:///path/to/file.db
        db_dir = Path(settings.database_url.split(":///")[-1]).parent
        db_dir.mkdir(parents=True, exist_ok=True)

    if not await db.check_connection():
        raise RuntimeError("Failed to connect to database")

    await db.create_tables()

    if settings.seed_database:
        async with db.session() as session:
            await seed_default_users(session)


async def seed_default_users(session: AsyncSession) -> int:
    """Seed the initial users if the users table is empty.

    Args:
        session: Database session.

    Returns:
        Number of users created.
    """
    from usermanagement.infrastructure.auth.password_hasher import hash_password
    from usermanagement.infrastructure.persistence.models import UserModel

    existing = (await session.execute(select(func.count(UserModel.id)))).scalar_one()
    if existing:
        logger.debug("Database already contains users; seeding skipped")
        return 0

    # Seeded passwords are for local use only.
    session.add_all(
        [
            UserModel(
                first_name="Alice",
                last_name="Johnson",
                email="alice@example.com",
                password_hash=hash_password("Alice!23"),
            ),
            UserModel(
                first_name="Bob",
                last_name="Smith",
                email="bob@example.com",
                password_hash=hash_password("Bob!23"),
            ),
        ]
    )
    await session.commit()
    logger.info("Database seeded with initial users", count=2)
    return 2


async def close_database() -> None:
    """Close the database connection on application shutdown."""
    db = get_db_manager()
    await db.disconnect()
