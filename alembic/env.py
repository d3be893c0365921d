# alembic/env.py
"""
Alembic environment for the marketplace schema.

The database URL always comes from config (DATABASE_URL, or the DB_* variables
for SQL Server), never from alembic.ini, so the app and its migrations cannot
point at different databases.

     alembic upgrade head            # apply
     alembic upgrade head --sql      # print the DDL instead (offline mode)
"""
import os
import sys
from logging.config import fileConfig

from alembic import context

# Project root on sys.path so config/database/models import when run from alembic/
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import DATABASE_URL  # noqa: E402
from database import build_engine  # noqa: E402
from models import Base  # noqa: E402

alembic_config = context.config

if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

target_metadata = Base.metadata

COMPARE_OPTIONS = {
    "compare_type": True,
    "compare_server_default": True,
}


def run_migrations_offline() -> None:
    """Emit SQL for the configured dialect without connecting."""
    context.configure(
        url=DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **COMPARE_OPTIONS,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Apply migrations through the same engine factory the app uses, so SQLite
    gets its foreign key pragma and SQL Server its pool settings.
    """
    engine = build_engine(DATABASE_URL)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                # SQLite can only ALTER tables by copying them
                render_as_batch=connection.dialect.name == "sqlite",
                **COMPARE_OPTIONS,
            )

            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
