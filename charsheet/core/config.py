"""
Application Configuration
Loads settings from environment variables.
"""

from typing import List
from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "Investigator Sheet API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database - SQLite for local dev, any SQLAlchemy URL for production
    DATABASE_URL: str = "sqlite:///./charsheet.db"

    # Local blob storage for portraits
    LOCAL_STORAGE_PATH: str = "./uploads"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Portrait limits
    MAX_IMAGES_PER_CHARACTER: int = 5
    MAX_IMAGE_SIZE_BYTES: int = 5 * 1024 * 1024

    # A character whose last session is older than this is listed as inactive
    ACTIVE_WINDOW_DAYS: int = 30

    # Backup document format
    BACKUP_VERSION: str = "1.0"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lowercase level names from the environment."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
