"""Alembic async migration environment."""
import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.ext.asyncio import create_async_engine

from api.shared.entities.registry import BaseEntity
from core.settings import get_settings

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

target_metadata = BaseEntity.metadata


def get_url() -> str:
    """alembic.ini ``sqlalchemy.url`` wins when set, otherwise application settings."""
    url = context.config.get_main_option("sqlalchemy.url")
    if not url:
        url = str(get_settings().DATABASE.DATABASE_URL)
    return url


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL without connecting)."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    engine = create_async_engine(get_url())
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
