import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

# backend/ holds the milk_ledger package
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from milk_ledger.config import DATABASE_URL
from milk_ledger.database import Base
from milk_ledger import models  # noqa: F401  registers the tables

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def migration_url() -> str:
    # the app talks asyncpg; migrations run on a blocking psycopg2 connection
    return DATABASE_URL.replace("postgresql+asyncpg", "postgresql+psycopg2")


def run_offline(url: str) -> None:
    context.configure(
        url=url,
        target_metadata=Base.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    engine = create_engine(url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=Base.metadata,
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline(migration_url())
else:
    run_online(migration_url())
