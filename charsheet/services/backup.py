"""
Backup Service
Exports a character with its full session history to a versioned JSON
document, and restores a character from one.

Restoring is destructive: the character's sessions and history are replaced
by the document's, and its scalar fields and skills are overwritten. History
rows are copied verbatim, never recomputed. Image metadata is exported for
reference only; restore leaves the stored images alone.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session, selectinload

from charsheet.core.config import settings
from charsheet.core.database import atomic
from charsheet.core.errors import InvalidBackupError, NotFoundError
from charsheet.models.character import Character, IDENTITY_FIELDS
from charsheet.models.session import InsanitySymptom, PlaySession, SanityHistory, SkillHistory
from charsheet.schemas.backup import (
    BackupCharacter,
    BackupDocument,
    BackupImage,
    BackupInsanitySymptom,
    BackupSanityHistory,
    BackupScenario,
    BackupSession,
    BackupSkillHistory,
    BackupStatistics,
)
from charsheet.schemas.character import AbilityScores, DerivedStats
from charsheet.services.session_recorder import find_or_create_scenario

logger = logging.getLogger(__name__)


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # timestamps are stored as naive UTC
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def validate_backup_document(raw: Any) -> BackupDocument:
    """
    Check a raw document before anything is touched.

    A document needs a version marker and a character block; anything that
    does not fit the format is rejected as a whole.
    """
    if not isinstance(raw, dict) or not raw.get("version") or not raw.get("character"):
        raise InvalidBackupError("Invalid backup data: version and character are required")
    try:
        return BackupDocument.model_validate(raw)
    except ValidationError as e:
        raise InvalidBackupError(
            "Invalid backup data",
            details=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e


class BackupService:
    """Service for backup export and restore."""

    def __init__(self, db: Session):
        self.db = db

    def _get_character(self, character_id: str, with_history: bool = False) -> Character:
        query = self.db.query(Character)
        if with_history:
            query = query.options(
                selectinload(Character.sessions).selectinload(PlaySession.skill_histories),
                selectinload(Character.sessions).selectinload(PlaySession.sanity_histories),
                selectinload(Character.sessions).selectinload(PlaySession.insanity_symptoms),
                selectinload(Character.images),
            )
        character = query.filter(Character.id == character_id).first()
        if not character:
            raise NotFoundError("Character not found")
        return character

    # --- export ---

    def export_backup(self, character_id: str) -> BackupDocument:
        character = self._get_character(character_id, with_history=True)

        sessions = []
        total_skill_growths = 0
        total_sanity_loss = 0
        total_symptoms = 0
        for session in character.sessions:
            total_skill_growths += len(session.skill_histories)
            total_sanity_loss += sum(h.old_value - h.new_value for h in session.sanity_histories)
            total_symptoms += len(session.insanity_symptoms)
            sessions.append(BackupSession(
                id=session.id,
                play_date=session.play_date,
                kp_name=session.kp_name,
                participants=session.participants,
                memo=session.memo,
                scenario=BackupScenario(
                    title=session.scenario.title,
                    author=session.scenario.author,
                    description=session.scenario.description,
                ),
                skill_histories=[
                    BackupSkillHistory.model_validate(h) for h in session.skill_histories
                ],
                sanity_histories=[
                    BackupSanityHistory.model_validate(h) for h in session.sanity_histories
                ],
                insanity_symptoms=[
                    BackupInsanitySymptom.model_validate(s) for s in session.insanity_symptoms
                ],
                created_at=session.created_at,
            ))

        document = BackupDocument(
            version=settings.BACKUP_VERSION,
            export_date=datetime.utcnow(),
            character=BackupCharacter(
                id=character.id,
                **{field: getattr(character, field) for field in IDENTITY_FIELDS},
                stats=AbilityScores(**character.stats),
                derived_stats=DerivedStats(**character.derived_stats),
                skills=dict(character.skills or {}),
                memo=character.memo,
                is_lost=character.is_lost,
                created_at=character.created_at,
                updated_at=character.updated_at,
            ),
            sessions=sessions,
            images=[BackupImage.model_validate(image) for image in character.images],
            statistics=BackupStatistics(
                total_sessions=len(sessions),
                total_skill_growths=total_skill_growths,
                total_sanity_loss=total_sanity_loss,
                total_insanity_symptoms=total_symptoms,
                total_images=len(character.images),
            ),
        )
        logger.info(f"Exported backup of character {character_id} ({len(sessions)} sessions)")
        return document

    # --- restore ---

    def import_backup(self, character_id: str, raw: Dict[str, Any]) -> Character:
        """Replace the character's state and history with the document's, atomically."""
        document = validate_backup_document(raw)
        character = self._get_character(character_id)

        with atomic(self.db):
            # children first, so the order does not depend on cascade configuration
            for model in (InsanitySymptom, SanityHistory, SkillHistory, PlaySession):
                self.db.query(model).filter(model.character_id == character_id).delete(
                    synchronize_session=False
                )
            self.db.expire(character, ["sessions"])

            self._restore_character(character, document.character)

            for session_data in document.sessions:
                self._restore_session(character_id, session_data)

        logger.info(
            f"Restored character {character_id} from backup "
            f"version {document.version} ({len(document.sessions)} sessions)"
        )
        self.db.refresh(character)
        return character

    def _restore_character(self, character: Character, data: BackupCharacter):
        for field in IDENTITY_FIELDS:
            setattr(character, field, getattr(data, field))
        character.apply_stats(data.stats.model_dump())
        character.apply_derived_stats(data.derived_stats.model_dump())
        character.skills = dict(data.skills)
        if data.memo is not None:
            character.memo = data.memo
        if data.is_lost is not None:
            character.is_lost = data.is_lost

    def _restore_session(self, character_id: str, data: BackupSession):
        scenario = find_or_create_scenario(
            self.db,
            data.scenario.title,
            author=data.scenario.author,
            description=data.scenario.description,
        )

        session = PlaySession(
            id=f"sess_{uuid.uuid4().hex[:12]}",
            character_id=character_id,
            scenario_id=scenario.id,
            kp_name=data.kp_name,
            play_date=data.play_date,
            participants=data.participants,
            memo=data.memo,
        )
        self.db.add(session)
        self.db.flush()

        for history in data.skill_histories:
            self.db.add(SkillHistory(
                id=f"skh_{uuid.uuid4().hex[:12]}",
                character_id=character_id,
                session_id=session.id,
                skill_name=history.skill_name,
                old_value=history.old_value,
                new_value=history.new_value,
                reason=history.reason,
            ))

        for history in data.sanity_histories:
            self.db.add(SanityHistory(
                id=f"snh_{uuid.uuid4().hex[:12]}",
                character_id=character_id,
                session_id=session.id,
                old_value=history.old_value,
                new_value=history.new_value,
                reason=history.reason,
            ))

        for symptom in data.insanity_symptoms:
            self.db.add(InsanitySymptom(
                id=f"sym_{uuid.uuid4().hex[:12]}",
                character_id=character_id,
                session_id=session.id,
                symptom_type=symptom.symptom_type,
                symptom_name=symptom.symptom_name,
                description=symptom.description,
                is_recovered=symptom.is_recovered,
                recovered_at=_naive_utc(symptom.recovered_at),
            ))
