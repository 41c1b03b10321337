"""Database connection settings."""

from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

from core.config.settings import settings
from core.logging.logger import logger


class DatabaseManager:
    """Owns the engine and the session factory."""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False
            )
        return self._session_factory

    def _create_engine(self) -> Engine:
        try:
            if self.database_url.startswith("sqlite"):
                # In-memory SQLite must share one connection across threads
                if ":memory:" in self.database_url or self.database_url == "sqlite://":
                    engine = create_engine(
                        self.database_url,
                        connect_args={"check_same_thread": False},
                        poolclass=StaticPool,
                        echo=settings.database_echo,
                    )
                else:
                    engine = create_engine(
                        self.database_url,
                        connect_args={"check_same_thread": False},
                        echo=settings.database_echo,
                    )
            else:
                engine = create_engine(
                    self.database_url,
                    poolclass=QueuePool,
                    pool_size=settings.database_pool_size,
                    max_overflow=settings.database_max_overflow,
                    echo=settings.database_echo,
                    pool_pre_ping=True,
                    pool_recycle=3600,
                )

            logger.info("Database engine created", backend=engine.dialect.name)
            return engine

        except Exception as e:
            logger.error(f"Failed to create database engine: {e}")
            raise

    def create_schema(self) -> None:
        """Creates all tables known to the entity metadata."""
        from domain.entities import Base

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ensured")

    def get_session(self) -> Session:
        return self.session_factory()

    def close(self) -> None:
        if self._engine:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")


# Global database manager
db_manager = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    session = db_manager.get_session()
    try:
        yield session
    finally:
        session.close()


def close_db_connections() -> None:
    db_manager.close()
