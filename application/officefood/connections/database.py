"""
SQLAlchemy ORM database configuration.
Engines use SQLAlchemy's built-in pooling; services receive sessions from get_db
or open one with get_db_session for scripts and middleware.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool
from typing import Generator
from contextlib import contextmanager


# Logger
from officefood.logging.utils import get_app_logger
logger = get_app_logger("database")

# Settings
from officefood.config.settings import OfficeFoodConfigs
configs = OfficeFoodConfigs()


def _normalize_url(url: str) -> str:
    # psycopg3 driver
    if url and url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


DATABASE_URL = _normalize_url(configs.DATABASE_URL)
DATABASE_READ_URL = _normalize_url(configs.DATABASE_READ_URL)

# Base class for ORM models
Base = declarative_base()


def _build_engine(url: str):
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(url, connect_args={"check_same_thread": False}, echo=False)

        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=configs.DATABASE_POOL_SIZE,
        max_overflow=configs.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True,     # Validate connections before use
        pool_recycle=3600,      # Recycle connections after 1 hour
        echo=False,
        connect_args={
            "keepalives_idle": 600,
            "keepalives_interval": 30,
            "keepalives_count": 3
        }
    )


engine = _build_engine(DATABASE_URL)

# Read engine for replicas, same as write if no replica is configured
read_engine = _build_engine(DATABASE_READ_URL) if DATABASE_READ_URL != DATABASE_URL else engine

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
ReadSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=read_engine)

logger.info(f"database_engines_initialized | dialect={engine.dialect.name} read_replica={read_engine is not engine}")


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for write database sessions.
    Services commit explicitly; anything left open is rolled back on error.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_read_db() -> Generator[Session, None, None]:
    """FastAPI dependency for read-only sessions (billing reports)."""
    db = ReadSessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_session(read_only: bool = False):
    """
    Session with transaction management for code outside the request cycle.

    Args:
        read_only: Whether to use the read replica session

    Yields:
        SQLAlchemy session object
    """
    session_class = ReadSessionLocal if read_only else SessionLocal
    db = session_class()
    try:
        yield db
        if not read_only:
            db.commit()
    except Exception:
        if not read_only:
            db.rollback()
        raise
    finally:
        db.close()


def close_db_pool():
    engine.dispose()
    if read_engine is not engine:
        read_engine.dispose()
