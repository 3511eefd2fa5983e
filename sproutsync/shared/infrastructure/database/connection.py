# 📄 File: sproutsync/shared/infrastructure/database/connection.py
#
# 🧭 Purpose (Layman Explanation):
# Manages the connection to the database where plants, tasks and gifts are stored,
# and makes sure every date we save comes back with its timezone attached.
#
# 🧪 Purpose (Technical Summary):
# Async SQLAlchemy engine management with pooling, health checks with retry,
# the declarative Base shared by every module and a UTC-normalizing DateTime type.
#
# 🔗 Dependencies:
# - sqlalchemy (async engine, TypeDecorator)
# - asyncpg (PostgreSQL async driver) / aiosqlite (tests)
# - sproutsync.shared.config.settings
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.shared.infrastructure.database.session (session factory)
# - All module ORM models (Base, UTCDateTime)
# - sproutsync.api.v1.health (database health)
# - sproutsync.main (startup/shutdown)

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from sproutsync.shared.config.settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


# =============================================================================
# DECLARATIVE BASE & COLUMN TYPES
# =============================================================================

class Base(DeclarativeBase):
    """Declarative base for every SproutSync ORM model."""


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware DateTime that always stores and returns UTC.

    Naive values are treated as UTC on the way in. Backends that drop tzinfo
    (SQLite) get it re-attached on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Current aware UTC timestamp, used as column default."""
    return datetime.now(timezone.utc)


# =============================================================================
# CONNECTION MANAGER
# =============================================================================

class DatabaseConnectionManager:
    """
    Manages database connections with connection pooling,
    health monitoring, and retry on health checks.
    """

    def __init__(self):
        self._engine: Optional[AsyncEngine] = None
        self._health_check_query = text("SELECT 1")
        self._retry_attempts = 3
        self._retry_delay = 1.0

    def _build_connection_params(self) -> Dict[str, Any]:
        """Build SQLAlchemy engine parameters from settings."""
        url = settings.database_url
        params: Dict[str, Any] = {
            "url": url,
            "echo": settings.DATABASE_ECHO,
            "pool_pre_ping": True,
        }

        if url.startswith("postgresql"):
            params.update({
                "pool_recycle": settings.database_pool_recycle,
                "pool_size": settings.database_pool_size,
                "max_overflow": settings.database_max_overflow,
                "pool_timeout": settings.database_pool_timeout,
                "connect_args": {
                    "server_settings": {
                        "application_name": "sproutsync_backend",
                        "jit": "off",
                    },
                    "command_timeout": 60,
                },
            })

        return params

    async def initialize(self, engine: Optional[AsyncEngine] = None) -> None:
        """
        Initialize the database engine.

        Args:
            engine: Pre-built engine to adopt instead of building one from settings
        """
        if self._engine is not None:
            logger.warning("⚠️ Database engine already initialized")
            return

        logger.info("🔌 Initializing database connection pool...")
        self._engine = engine or create_async_engine(**self._build_connection_params())
        logger.info("✅ Database engine initialized")

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform database health check and return structured status.
        """
        if self._engine is None:
            return {
                "status": "unhealthy",
                "error": "Database engine not initialized",
                "timestamp": utc_now().isoformat(),
            }

        last_error = ""
        for attempt in range(self._retry_attempts):
            try:
                async with self._engine.connect() as conn:
                    result = await conn.execute(self._health_check_query)
                    result.scalar()

                return {
                    "status": "healthy",
                    "database": self._engine.dialect.name,
                    "timestamp": utc_now().isoformat(),
                }

            except Exception as e:
                last_error = str(e)
                logger.warning(
                    f"⚠️ Database health check failed (attempt {attempt + 1}/{self._retry_attempts}): {e}"
                )
                if attempt < self._retry_attempts - 1:
                    await asyncio.sleep(self._retry_delay * (2 ** attempt))

        logger.error("❌ Database health check failed after all retry attempts")
        return {
            "status": "unhealthy",
            "error": last_error,
            "timestamp": utc_now().isoformat(),
        }

    async def close(self) -> None:
        """Close database engine and all connections."""
        if self._engine is None:
            logger.warning("Database engine not initialized, nothing to close")
            return

        logger.info("Closing database connection pool...")
        await self._engine.dispose()
        self._engine = None
        logger.info("✅ Database connection pool closed")

    @property
    def engine(self) -> Optional[AsyncEngine]:
        """Get the SQLAlchemy async engine."""
        return self._engine

    @property
    def is_initialized(self) -> bool:
        """Check if database engine is initialized."""
        return self._engine is not None


# Global database connection manager instance
db_manager = DatabaseConnectionManager()


async def init_database(engine: Optional[AsyncEngine] = None) -> None:
    """Initialize the global database connection manager."""
    try:
        await db_manager.initialize(engine=engine)
    except Exception as e:
        logger.error(f"❌ Database initialization failed: {e}", exc_info=True)
        raise


async def close_database() -> None:
    """Close the global database connection manager."""
    await db_manager.close()


async def get_database_engine() -> AsyncEngine:
    """
    Get the database engine instance.

    Raises:
        RuntimeError: If database is not initialized
    """
    if not db_manager.is_initialized:
        raise RuntimeError("Database not initialized. Call init_database() first.")

    return db_manager.engine


async def database_health_check() -> Dict[str, Any]:
    """Perform database health check."""
    return await db_manager.health_check()
