"""
Alembic Migration Environment
==============================

What:  Runs the blog schema migrations against DATABASE_URL.
How:   Online mode opens an async engine (asyncpg in production) and hands a
       sync connection to Alembic through run_sync(); offline mode prints SQL.
Who:   `alembic upgrade head` / `alembic downgrade -1`, run from backend/.

The URL always comes from blogapi.config.settings; alembic.ini holds no
credentials.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from blogapi.config import settings
from blogapi.database import Base

# Registers users/posts/comments on Base.metadata for --autogenerate
from blogapi.models import Comment, Post, User  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

config.set_main_option("sqlalchemy.url", settings.database_url)


def _configure(**kwargs) -> None:
    # compare_type: detect column type changes (e.g. String length) on autogenerate
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout without a database connection."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Apply pending revisions over a NullPool async engine."""
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_with_connection)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
