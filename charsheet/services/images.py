"""
Character Image Service
Upload, rename and delete portraits, enforcing the per-character quota and
the size/type limits.
"""

import logging
import uuid
from enum import Enum
from typing import List, Optional

from sqlalchemy.orm import Session

from charsheet.core.config import settings
from charsheet.core.database import atomic
from charsheet.core.errors import ImageQuotaExceeded, NotFoundError, ValidationFailed
from charsheet.models.character import Character
from charsheet.models.image import CharacterImage
from charsheet.services.storage import StorageService

logger = logging.getLogger(__name__)


class ImageDeletion(str, Enum):
    """
    Outcome of deleting an image.

    A missing row is reported with NotFoundError instead; the row is always
    removed once found, even when the stored file could not be.
    """
    DELETED = "deleted"
    ORPHANED_BLOB = "orphaned_blob"


class ImageService:
    """Service for character portraits."""

    def __init__(self, db: Session, storage: StorageService):
        self.db = db
        self.storage = storage

    def _get_character(self, character_id: str) -> Character:
        character = self.db.query(Character).filter(Character.id == character_id).first()
        if not character:
            raise NotFoundError("Character not found")
        return character

    def _get_image(self, character_id: str, image_id: str) -> CharacterImage:
        image = (
            self.db.query(CharacterImage)
            .filter(CharacterImage.id == image_id, CharacterImage.character_id == character_id)
            .first()
        )
        if not image:
            raise NotFoundError("Image not found")
        return image

    def list_images(self, character_id: str) -> List[CharacterImage]:
        """Portraits of a character, newest first."""
        self._get_character(character_id)
        return (
            self.db.query(CharacterImage)
            .filter(CharacterImage.character_id == character_id)
            .order_by(CharacterImage.created_at.desc())
            .all()
        )

    async def upload(
        self,
        character_id: str,
        data: bytes,
        original_name: str,
        content_type: Optional[str],
    ) -> CharacterImage:
        """
        Store a portrait and record it.

        Checks run before anything is written: quota first, then type and
        size. A rejected upload leaves neither a row nor a stored file.
        """
        self._get_character(character_id)

        count = self.db.query(CharacterImage).filter(CharacterImage.character_id == character_id).count()
        if count >= settings.MAX_IMAGES_PER_CHARACTER:
            raise ImageQuotaExceeded(
                f"A character can have at most {settings.MAX_IMAGES_PER_CHARACTER} images"
            )

        if not content_type or not content_type.startswith("image/"):
            raise ValidationFailed("Only image files can be uploaded")

        if len(data) > settings.MAX_IMAGE_SIZE_BYTES:
            raise ValidationFailed(
                f"Image must be {settings.MAX_IMAGE_SIZE_BYTES // (1024 * 1024)}MB or smaller"
            )

        original_name = original_name or "image"
        extension = original_name.rsplit(".", 1)[-1].lower() if "." in original_name else "jpg"
        key = f"characters/{character_id}/{uuid.uuid4().hex}.{extension}"

        url = await self.storage.upload_bytes(data, key)

        image = CharacterImage(
            id=f"img_{uuid.uuid4().hex[:12]}",
            character_id=character_id,
            filename=key,
            original_name=original_name,
            file_path=url,
            file_size=len(data),
            mime_type=content_type,
        )
        try:
            with atomic(self.db):
                self.db.add(image)
        except Exception:
            # the row never made it, so the file has no owner
            await self._discard_blob(key)
            raise
        self.db.refresh(image)

        logger.info(f"Stored image {image.id} for character {character_id}")
        return image

    def rename(self, character_id: str, image_id: str, image_name: Optional[str]) -> CharacterImage:
        image = self._get_image(character_id, image_id)
        with atomic(self.db):
            image.image_name = image_name.strip() if image_name and image_name.strip() else None
        self.db.refresh(image)
        return image

    async def delete(self, character_id: str, image_id: str) -> ImageDeletion:
        """Delete the stored file best-effort, then the row."""
        image = self._get_image(character_id, image_id)

        outcome = ImageDeletion.DELETED
        if not await self._discard_blob(image.filename):
            outcome = ImageDeletion.ORPHANED_BLOB

        with atomic(self.db):
            self.db.delete(image)
        return outcome

    async def _discard_blob(self, key: str) -> bool:
        try:
            await self.storage.delete_file(key)
        except FileNotFoundError:
            # nothing left behind to orphan
            logger.warning(f"Stored file already missing: {key}")
            return True
        except OSError as e:
            logger.warning(f"Could not delete stored file {key}: {e}")
            return False
        return True
