"""Alembic environment — async migrations for the campaigns slice and reactions.

Invariants:
    - Database URL comes from freecredit.config.Settings, the same source the
      app uses (DATABASE_URL, postgresql:// rewritten for asyncpg)
    - Autogenerate only considers tables mapped in freecredit.models; the rest of
      the directory's schema shares this database and is never diffed or dropped
    - The campaigns table is shared: only columns this service maps are compared
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from freecredit.config import get_settings
from freecredit.db.base import Base
from freecredit.models import Campaign, Reaction  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
OWNED_TABLES = frozenset(target_metadata.tables)


def include_object(obj, name, type_, reflected, compare_to) -> bool:
    """Skip reflected tables and columns this service does not map."""
    if type_ == "table":
        return name in OWNED_TABLES
    if type_ == "column" and reflected and compare_to is None:
        return obj.table.name != Campaign.__tablename__
    return True


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        include_object=include_object,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(
        url=get_settings().database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = get_settings().database_url
    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
