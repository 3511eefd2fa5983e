# 📄 File: sproutsync/shared/infrastructure/database/session.py
#
# 🧭 Purpose (Layman Explanation):
# Gives each request its own conversation with the database and makes sure that either
# everything in that request is saved together or nothing is.
#
# 🧪 Purpose (Technical Summary):
# Async SQLAlchemy session management: a per-request unit of work committed on success
# and rolled back on error, a FastAPI dependency and a context manager for background jobs.
#
# 🔗 Dependencies:
# - sqlalchemy.ext.asyncio (AsyncSession, async_sessionmaker)
# - sproutsync.shared.infrastructure.database.connection (database engine)
# - sproutsync.shared.core.exceptions
#
# 🔄 Connected Modules / Calls From:
# - Every presentation router (Depends(get_db_session))
# - Background services (calendar sync, notifications, Celery tasks)
# - sproutsync.main (startup)

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import exc
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sproutsync.shared.core.exceptions import DatabaseError, TransactionError
from sproutsync.shared.infrastructure.database.connection import get_database_engine

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """
    Manages database sessions with transaction handling and automatic cleanup.
    """

    def __init__(self):
        self._session_factory: Optional[async_sessionmaker] = None
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the session factory with database engine."""
        try:
            engine = await get_database_engine()
        except RuntimeError as e:
            logger.error(f"❌ Failed to initialize database session factory: {e}")
            raise DatabaseError(f"Session initialization failed: {e}")

        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=True,
        )
        self._initialized = True
        logger.info("✅ Database session factory initialized")

    def reset(self) -> None:
        """Forget the session factory (engine was disposed)."""
        self._session_factory = None
        self._initialized = False

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get an async database session with automatic transaction management.

        Yields:
            AsyncSession: Database session

        Raises:
            DatabaseError: If a SQLAlchemy error escapes the unit of work
            TransactionError: If the final commit fails
        """
        if not self._initialized or self._session_factory is None:
            raise DatabaseError("Session manager not initialized")

        session: AsyncSession = self._session_factory()

        try:
            yield session
        except exc.SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"❌ Database error occurred, transaction rolled back: {e}")
            await session.close()
            raise DatabaseError(f"Database operation failed: {e}")
        except BaseException:
            # Domain errors and cancellations propagate unchanged
            await session.rollback()
            await session.close()
            raise

        try:
            await session.commit()
        except exc.SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"❌ Commit failed, transaction rolled back: {e}")
            raise TransactionError(f"Transaction failed: {e}", operation="commit")
        finally:
            await session.close()

    def is_initialized(self) -> bool:
        """Check if session manager is initialized."""
        return self._initialized


# Global session manager instance
session_manager = DatabaseSessionManager()


async def initialize_sessions() -> None:
    """Initialize the global database session manager."""
    await session_manager.initialize()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides one transactional session per request.

    Usage:
        @router.post("/plants")
        async def create_plant(
            payload: PlantCreateRequest,
            db: AsyncSession = Depends(get_db_session)
        ):
            ...

    Yields:
        AsyncSession: Database session
    """
    async with session_manager.get_session() as session:
        yield session


@asynccontextmanager
async def database_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for database work outside of FastAPI route handlers.

    Example:
        async with database_session() as db:
            tasks = await overdue_service.find_overdue_tasks(db)

    Yields:
        AsyncSession: Database session
    """
    async with session_manager.get_session() as session:
        yield session


__all__ = [
    "DatabaseSessionManager",
    "session_manager",
    "initialize_sessions",
    "get_db_session",
    "database_session",
]
