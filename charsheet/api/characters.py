"""
Characters API Routes
Handles character creation, retrieval, update, deletion and text import.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.orm import Session, selectinload

from charsheet.api.deps import get_db, get_storage
from charsheet.core.config import settings
from charsheet.core.database import atomic
from charsheet.core.errors import ConcurrentUpdateError, ValidationFailed
from charsheet.models.character import Character, IDENTITY_FIELDS
from charsheet.models.session import PlaySession
from charsheet.schemas.character import (
    CharacterCreate,
    CharacterDetail,
    CharacterImportRequest,
    CharacterResponse,
    CharacterSummary,
    CharacterUpdate,
    ParsedCharacter,
    SkillGrowthRoll,
    SkillGrowthRollRequest,
)
from charsheet.services.rules import derive_stats, grow_skill
from charsheet.services.skills import default_skills
from charsheet.services.storage import StorageService
from charsheet.services.text_import import parse_character_text

logger = logging.getLogger(__name__)

router = APIRouter()

# fields an update may set back to null
CLEARABLE_FIELDS = {"occupation", "age", "gender", "birthplace", "residence", "memo"}


def _get_character_or_404(db: Session, character_id: str) -> Character:
    character = db.query(Character).filter(Character.id == character_id).first()
    if not character:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Character not found"
        )
    return character


def _summarize(character: Character, now: datetime) -> CharacterSummary:
    """List row with the values computed from the character's sessions."""
    sessions = character.sessions  # newest play date first
    last = sessions[0] if sessions else None

    if not sessions:
        list_status = "new"
    elif last.play_date > (now - timedelta(days=settings.ACTIVE_WINDOW_DAYS)).date():
        list_status = "active"
    else:
        list_status = "inactive"

    return CharacterSummary(
        id=character.id,
        name=character.name,
        occupation=character.occupation,
        age=character.age,
        san=character.san,
        max_san=character.max_san,
        is_lost=character.is_lost,
        created_at=character.created_at,
        updated_at=character.updated_at,
        last_play_date=last.play_date if last else None,
        last_scenario=last.scenario.title if last else None,
        session_count=len(sessions),
        active_symptoms=sum(1 for s in character.insanity_symptoms if not s.is_recovered),
        status=list_status,
    )


def _create_from_parsed(db: Session, parsed: ParsedCharacter) -> Character:
    if not parsed.basic_info.name:
        raise ValidationFailed("Not a recognized Iakyara character export: no name found")

    character = Character(
        id=f"char_{uuid.uuid4().hex[:8]}",
        **parsed.basic_info.model_dump(),
        skills=dict(parsed.skills),
        memo=parsed.memo or None,
        is_lost=False,
    )
    character.apply_stats(parsed.stats.model_dump())
    character.apply_derived_stats(parsed.derived_stats.model_dump())

    with atomic(db):
        db.add(character)
    db.refresh(character)

    logger.info(f"Imported character {character.id} ({character.name}) from text")
    return character


@router.get("", response_model=List[CharacterSummary])
async def list_characters(
    db: Session = Depends(get_db),
):
    """List all characters, most recently updated first."""
    characters = (
        db.query(Character)
        .options(
            selectinload(Character.sessions).joinedload(PlaySession.scenario),
            selectinload(Character.insanity_symptoms),
        )
        .order_by(Character.updated_at.desc())
        .all()
    )
    now = datetime.utcnow()
    return [_summarize(character, now) for character in characters]


@router.post("", response_model=CharacterResponse, status_code=status.HTTP_201_CREATED)
async def create_character(
    data: CharacterCreate,
    db: Session = Depends(get_db),
):
    """
    Create a new character.

    Derived stats are computed from the ability scores unless given; skills
    sent are laid over the catalog's base values.
    """
    derived = data.derived_stats or derive_stats(data.stats)
    skills = default_skills()
    skills.update(data.skills or {})

    character = Character(
        id=f"char_{uuid.uuid4().hex[:8]}",
        **{field: getattr(data, field) for field in IDENTITY_FIELDS},
        skills=skills,
        memo=data.memo,
        is_lost=data.is_lost,
    )
    character.apply_stats(data.stats.model_dump())
    character.apply_derived_stats(derived.model_dump())

    with atomic(db):
        db.add(character)
    db.refresh(character)

    logger.info(f"Created character {character.id} ({character.name})")
    return character


@router.post("/import/preview", response_model=ParsedCharacter)
async def preview_import(data: CharacterImportRequest):
    """Parse an Iakyara text export without saving anything."""
    parsed = parse_character_text(data.text)
    if not parsed.basic_info.name:
        raise ValidationFailed("Not a recognized Iakyara character export: no name found")
    return parsed


@router.post("/import", response_model=CharacterResponse, status_code=status.HTTP_201_CREATED)
async def import_character(
    data: CharacterImportRequest,
    db: Session = Depends(get_db),
):
    """Create a character from an Iakyara text export."""
    return _create_from_parsed(db, parse_character_text(data.text))


@router.post("/import/upload", response_model=CharacterResponse, status_code=status.HTTP_201_CREATED)
async def import_character_file(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """Create a character from an uploaded Iakyara .txt export."""
    content = await file.read()
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationFailed("Text export must be UTF-8 encoded")
    return _create_from_parsed(db, parse_character_text(text))


@router.get("/{character_id}", response_model=CharacterDetail)
async def get_character(
    character_id: str,
    db: Session = Depends(get_db),
):
    """Get a character with its images."""
    return _get_character_or_404(db, character_id)


@router.put("/{character_id}", response_model=CharacterResponse)
async def update_character(
    character_id: str,
    update_data: CharacterUpdate,
    db: Session = Depends(get_db),
):
    """
    Update character details. Only fields present in the body change.

    When ``versionId`` is sent it must match the stored version, otherwise
    the update is refused with 409.
    """
    character = _get_character_or_404(db, character_id)

    update_dict = update_data.model_dump(exclude_unset=True)
    expected_version = update_dict.pop("version_id", None)
    if expected_version is not None and expected_version != character.version_id:
        raise ConcurrentUpdateError("Character was changed by another request; reload and try again")

    with atomic(db):
        stats = update_dict.pop("stats", None)
        derived = update_dict.pop("derived_stats", None)
        if stats is not None:
            character.apply_stats(stats)
        if derived is not None:
            character.apply_derived_stats(derived)
        if update_dict.get("skills") is not None:
            update_dict["skills"] = dict(update_dict["skills"])

        for field, value in update_dict.items():
            if value is None and field not in CLEARABLE_FIELDS:
                continue
            setattr(character, field, value)

    db.refresh(character)
    return character


@router.patch("/{character_id}", response_model=CharacterResponse)
async def patch_character(
    character_id: str,
    update_data: CharacterUpdate,
    db: Session = Depends(get_db),
):
    """Partially update character details."""
    return await update_character(character_id, update_data, db)


@router.delete("/{character_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_character(
    character_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """Delete a character with its sessions, history and images."""
    character = _get_character_or_404(db, character_id)

    with atomic(db):
        db.delete(character)

    # Rows are gone; stored files are removed best-effort
    try:
        await storage.delete_folder(f"characters/{character_id}/")
    except OSError as e:
        logger.warning(f"Could not delete stored images of {character_id}: {e}")

    logger.info(f"Deleted character {character_id}")
    return None


@router.post("/{character_id}/skill-growth/roll", response_model=List[SkillGrowthRoll])
async def roll_skill_growth(
    character_id: str,
    data: SkillGrowthRollRequest,
    db: Session = Depends(get_db),
):
    """
    Roll growth checks for skills used in a session.

    Nothing is saved; grown skills go into the next session report.
    """
    character = _get_character_or_404(db, character_id)
    skills = character.skills or {}

    unknown = [name for name in data.skills if name not in skills]
    if unknown:
        raise ValidationFailed(f"Unknown skills: {', '.join(unknown)}")

    return [grow_skill(name, skills[name]) for name in data.skills]
