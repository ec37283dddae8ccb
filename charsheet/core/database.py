"""
Database Configuration
SQLAlchemy engine and session management.
Supports SQLite (local dev) and any server database SQLAlchemy can reach.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from charsheet.core.config import settings
from charsheet.core.errors import ConcurrentUpdateError, TransactionFailed

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str) -> Engine:
    """Create an engine with settings appropriate for the backend."""
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},  # Needed for SQLite
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


engine = create_db_engine(settings.DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def init_db(bind: Engine = None):
    """Initialize database tables."""
    from charsheet import models  # noqa: F401  registers every table on Base.metadata

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ready")


@contextmanager
def atomic(db: Session):
    """
    Run a block as one unit of work: commit on success, roll back on any error.

    Persistence failures surface as TransactionFailed, a failed version check
    on a character row as ConcurrentUpdateError; anything else is re-raised
    unchanged after the rollback.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.warning(f"Concurrent update detected, rolled back: {e}")
        raise ConcurrentUpdateError(
            "Character was changed by another request; reload and try again"
        ) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Transaction rolled back", exc_info=True)
        raise TransactionFailed("Could not save changes", details=str(e)) from e
    except Exception:
        db.rollback()
        logger.error("Transaction rolled back", exc_info=True)
        raise
