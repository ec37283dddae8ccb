"""
Backup API Routes
Full JSON export of a character and destructive restore from such a document.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from charsheet.api.deps import get_db
from charsheet.schemas.backup import BackupDocument, RestoreResponse
from charsheet.services.backup import BackupService

router = APIRouter()


@router.get("/{character_id}/backup", response_model=BackupDocument)
async def export_backup(
    character_id: str,
    db: Session = Depends(get_db),
):
    """Export the character, its sessions and history, and image metadata."""
    return BackupService(db).export_backup(character_id)


@router.post("/{character_id}/backup", response_model=RestoreResponse)
async def restore_backup(
    character_id: str,
    document: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
):
    """
    Restore a character from a backup document.

    Existing sessions and history are replaced. A document without a version
    or character block is rejected before anything changes.
    """
    service = BackupService(db)
    character = service.import_backup(character_id, document)
    return RestoreResponse(
        message="Backup restored",
        character_id=character.id,
        restored_sessions=len(character.sessions),
    )
