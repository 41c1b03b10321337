"""Database module."""

from .connection import (
    db_manager,
    get_db,
    close_db_connections,
    DatabaseManager
)

__all__ = [
    "db_manager",
    "get_db",
    "close_db_connections",
    "DatabaseManager"
]
