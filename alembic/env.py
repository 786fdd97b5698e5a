"""Alembic environment for xbs.

Migrations run against the database the server is configured with
(``XBS_`` environment variables or xbs.yml) unless alembic.ini sets
``sqlalchemy.url``. Online migrations use a DatabaseManager engine, so
SQLite connections get the same pragmas as the running server.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy.engine import Connection

from alembic import context

from xbs.core.config import Settings, get_settings
from xbs.infrastructure.persistence import models  # noqa: F401
from xbs.infrastructure.persistence.database import Base, DatabaseManager

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def migration_settings() -> Settings:
    """Server settings, with the database URL from alembic.ini when set."""
    settings = get_settings()
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return settings.model_copy(update={"database_url": url})
    return settings


def run_migrations_offline(settings: Settings) -> None:
    """Emit the migration SQL to the script output instead of executing it."""
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=settings.is_sqlite,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection, render_as_batch: bool) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=render_as_batch,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online(settings: Settings) -> None:
    """Run the migrations on one connection of the server's engine."""
    db = DatabaseManager(settings)
    try:
        async with db.engine.connect() as connection:
            await connection.run_sync(do_run_migrations, settings.is_sqlite)
    finally:
        await db.disconnect()


settings = migration_settings()
if context.is_offline_mode():
    run_migrations_offline(settings)
else:
    asyncio.run(run_migrations_online(settings))
