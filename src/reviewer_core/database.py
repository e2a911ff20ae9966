"""Database connection and session management."""
import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from .config import get_settings
from .models import Base

logger = logging.getLogger("reviewer-core.database")

settings = get_settings()


def _engine_options(database_url: str) -> dict:
    """Pool options for the configured backend (SQLite ignores sizing)."""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    # One connection per logical transaction, bounded overall
    return {
        "pool_pre_ping": True,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": settings.db_pool_recycle,
    }


# Create database engine
engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = engine) -> None:
    """Create all tables that do not exist yet (local runs and tests)."""
    Base.metadata.create_all(bind=bind)
    logger.info("Database schema ensured")
