"""
Shared declarative base for all domain entities.
Kept in its own module to avoid circular imports.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
