"""
API Dependencies
Common dependencies for FastAPI routes (database sessions, storage).
"""

from typing import Generator
from charsheet.core.database import SessionLocal
from charsheet.services.storage import StorageService


def get_db() -> Generator:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_storage() -> StorageService:
    """Get storage service rooted at the configured path."""
    return StorageService()
