"""Alembic environment: application settings and the entity metadata."""

from alembic import context
from sqlalchemy import engine_from_config, pool

from core.config.settings import settings
from core.logging.logger import logger
from domain.entities import Base

config = context.config

# An explicitly configured URL (tests, apply_migration.py) wins over the settings
if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", settings.database_url)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL without connecting."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()

    logger.info("Migrations rendered offline")


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
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

    logger.info("Migrations applied", dialect=connectable.dialect.name)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
