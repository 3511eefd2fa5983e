# 📄 File: migrations/env.py
# 🧭 Purpose (Layman Explanation):
# Tells Alembic how to reach the SproutSync database and which tables exist, so schema
# changes can be applied the same way on every machine.
# 🧪 Purpose (Technical Summary):
# Alembic environment: resolves the database URL from settings (.env via python-dotenv),
# registers every ORM model on the shared metadata and runs migrations offline or online
# (async engine when the URL uses an async driver).
# 🔗 Dependencies:
# - alembic (migration tool)
# - SQLAlchemy (ORM)
# - asyncpg (PostgreSQL async driver)
# - python-dotenv (environment variables)
# 🔄 Connected Modules / Calls From:
# - alembic CLI commands (upgrade, downgrade, revision)
# - sproutsync.shared.infrastructure.database.registry

import asyncio
import os
import sys
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool
from sqlalchemy.ext.asyncio import async_engine_from_config

# Load environment variables
load_dotenv()

# Make the sproutsync package importable when running from a checkout
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from sproutsync.shared.config.settings import get_settings  # noqa: E402
from sproutsync.shared.infrastructure.database.registry import get_metadata  # noqa: E402

# This is the Alembic Config object
config = context.config

# Interpret the config file for Python logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Every module's models registered for 'autogenerate' support
target_metadata = get_metadata()

ASYNC_DRIVERS = ("+asyncpg", "+aiosqlite")


def get_database_url() -> str:
    """Database URL from settings (DATABASE_URL or the DB_* components)."""
    return get_settings().database_url


def is_async_url(url: str) -> bool:
    return any(driver in url for driver in ASYNC_DRIVERS)


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.

    Emits SQL to the script output without a DBAPI connection.
    """
    context.configure(
        url=get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    """
    Run migrations with the given connection.

    Args:
        connection: Database connection object
    """
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations through an async engine."""
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = get_database_url()

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    url = get_database_url()
    if is_async_url(url):
        asyncio.run(run_async_migrations())
        return

    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = url
    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        do_run_migrations(connection)


# Determine which mode to run migrations in
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
