import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

# make `app` importable when alembic runs from backend/
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.abspath(os.path.join(current_dir, ".."))
sys.path.insert(0, project_root)

from app.models import Base  # noqa: E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# alembic runs synchronously, so async driver names are swapped for sync ones
SYNC_DRIVERS = {
    "postgresql+asyncpg": "postgresql",
    "sqlite+aiosqlite": "sqlite",
}


def to_sync_url(url: str) -> str:
    scheme, sep, rest = url.partition("://")
    return SYNC_DRIVERS.get(scheme, scheme) + sep + rest


def get_db_url() -> str:
    """
    DB URL priority:
    1) ALEMBIC_DB_URL
    2) DATABASE_URL
    3) ASYNC_DATABASE_URL, with the driver made synchronous
    4) sqlalchemy.url from alembic.ini
    """
    env_url = os.getenv("ALEMBIC_DB_URL") or os.getenv("DATABASE_URL")
    if env_url:
        return env_url
    async_url = os.getenv("ASYNC_DATABASE_URL")
    if async_url:
        return to_sync_url(async_url)
    return config.get_main_option("sqlalchemy.url")


def run_migrations_offline() -> None:
    """Emit SQL without a live connection."""
    url = get_db_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = get_db_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
