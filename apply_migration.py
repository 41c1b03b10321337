#!/usr/bin/env python3
"""Apply the alembic migrations to the configured database."""

import sys
from typing import Optional

from alembic import command
from alembic.config import Config

from core.config.settings import settings
from core.logging.logger import logger


def apply_migrations(database_url: Optional[str] = None, revision: str = "head") -> None:
    """Upgrades the database to ``revision``."""
    database_url = database_url or settings.database_url

    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)

    logger.info("Applying migrations", revision=revision)
    command.upgrade(alembic_cfg, revision)
    command.current(alembic_cfg)


if __name__ == "__main__":
    try:
        apply_migrations(sys.argv[1] if len(sys.argv) > 1 else None)
    except Exception as e:
        logger.error("Migration failed", error=str(e))
        sys.exit(1)
    logger.info("Migrations applied successfully")
