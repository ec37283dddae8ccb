"""
Character Images API Routes
Upload, list, rename and delete character portraits.
"""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from charsheet.api.deps import get_db, get_storage
from charsheet.schemas.image import CharacterImageRename, CharacterImageResponse, ImageDeleteResponse
from charsheet.services.images import ImageService
from charsheet.services.storage import StorageService

router = APIRouter()


def get_image_service(
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
) -> ImageService:
    return ImageService(db, storage)


@router.get("/{character_id}/images", response_model=List[CharacterImageResponse])
async def list_images(
    character_id: str,
    images: ImageService = Depends(get_image_service),
):
    """List a character's images, newest first."""
    return images.list_images(character_id)


@router.post(
    "/{character_id}/images",
    response_model=CharacterImageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_image(
    character_id: str,
    image: UploadFile = File(...),
    images: ImageService = Depends(get_image_service),
):
    """
    Upload a portrait.

    Images only, 5MB at most, and no more than five per character.
    """
    data = await image.read()
    return await images.upload(
        character_id,
        data,
        original_name=image.filename or "image",
        content_type=image.content_type,
    )


@router.put("/{character_id}/images/{image_id}", response_model=CharacterImageResponse)
async def rename_image(
    character_id: str,
    image_id: str,
    body: CharacterImageRename,
    images: ImageService = Depends(get_image_service),
):
    """Set or clear the display label of an image."""
    return images.rename(character_id, image_id, body.image_name)


@router.delete("/{character_id}/images/{image_id}", response_model=ImageDeleteResponse)
async def delete_image(
    character_id: str,
    image_id: str,
    images: ImageService = Depends(get_image_service),
):
    """
    Delete an image.

    The row is removed even when the stored file cannot be; the result then
    reads ``orphaned_blob``.
    """
    outcome = await images.delete(character_id, image_id)
    return ImageDeleteResponse(id=image_id, result=outcome.value)
