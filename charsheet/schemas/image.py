"""
Image Schemas
Pydantic models for character portrait endpoints.
"""

from datetime import datetime
from typing import Optional, Literal

from charsheet.schemas.base import ApiModel


class CharacterImageResponse(ApiModel):
    """Stored portrait metadata."""
    id: str
    character_id: str
    filename: str
    original_name: str
    file_path: str
    image_name: Optional[str] = None
    file_size: int
    mime_type: str
    created_at: datetime


class CharacterImageRename(ApiModel):
    """New display label; empty clears it."""
    image_name: Optional[str] = None


class ImageDeleteResponse(ApiModel):
    """Outcome of an image deletion."""
    id: str
    result: Literal["deleted", "orphaned_blob"]
