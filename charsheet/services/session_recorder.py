"""
Session Recorder
Records a played session against a character in one transaction:
scenario lookup, session row, skill and sanity audit trail, insanity
symptoms, and the character's new skills and sanity.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from charsheet.core.database import atomic
from charsheet.core.errors import NotFoundError, ValidationFailed
from charsheet.models.character import Character
from charsheet.models.scenario import Scenario
from charsheet.models.session import InsanitySymptom, PlaySession, SanityHistory, SkillHistory
from charsheet.schemas.session import SessionReport
from charsheet.services.rules import apply_sanity_loss

logger = logging.getLogger(__name__)


def skill_growth_reason(scenario_title: str) -> str:
    return f"{scenario_title}での成長"


def sanity_loss_reason(scenario_title: str) -> str:
    return f"{scenario_title}でのSAN値減少"


def find_or_create_scenario(
    db: Session,
    title: str,
    author: Optional[str] = None,
    description: Optional[str] = None,
) -> Scenario:
    """
    Return the scenario with exactly this title, creating it if there is none.

    Titles are not unique in storage. When two requests introduce the same new
    title at once both rows survive, and the oldest is the one found from then on.
    """
    scenario = (
        db.query(Scenario)
        .filter(Scenario.title == title)
        .order_by(Scenario.created_at, Scenario.id)
        .first()
    )
    if scenario:
        return scenario

    scenario = Scenario(
        id=f"scn_{uuid.uuid4().hex[:12]}",
        title=title,
        author=author or None,
        description=description or None,
        created_at=datetime.utcnow(),
    )
    db.add(scenario)
    # make it visible to the next lookup in this transaction (autoflush is off)
    db.flush()
    return scenario


@dataclass
class SessionRecordResult:
    """What a recorded session created and changed."""
    session: PlaySession
    scenario: Scenario
    character: Character
    skill_growth_count: int
    sanity_loss: int
    insanity_count: int

    @property
    def summary(self):
        return {
            "skill_growth_count": self.skill_growth_count,
            "sanity_loss": self.sanity_loss,
            "insanity_count": self.insanity_count,
        }


class SessionRecorder:
    """
    Service for play sessions.

    Skills and sanity on the character row are the current truth; the
    history rows written here are an audit trail and are never replayed.
    Two sessions recorded for the same character at the same moment do not
    merge: the second commit fails its version check and raises
    ConcurrentUpdateError.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_character(self, character_id: str) -> Character:
        character = self.db.query(Character).filter(Character.id == character_id).first()
        if not character:
            raise NotFoundError("Character not found")
        return character

    def record(self, character_id: str, report: SessionReport) -> SessionRecordResult:
        title = (report.scenario_title or "").strip()
        if not title:
            raise ValidationFailed("Scenario title is required")

        character = self._get_character(character_id)

        with atomic(self.db):
            scenario = find_or_create_scenario(self.db, title, author=report.kp_name)

            session = PlaySession(
                id=f"sess_{uuid.uuid4().hex[:12]}",
                character_id=character.id,
                scenario_id=scenario.id,
                kp_name=report.kp_name or None,
                play_date=report.play_date,
                participants=report.participants or None,
                memo=report.memo or None,
            )
            self.db.add(session)
            self.db.flush()

            skills = dict(character.skills or {})
            for growth in report.skill_growth:
                self.db.add(SkillHistory(
                    id=f"skh_{uuid.uuid4().hex[:12]}",
                    character_id=character.id,
                    session_id=session.id,
                    skill_name=growth.skill_name,
                    old_value=growth.old_value,
                    new_value=growth.new_value,
                    reason=skill_growth_reason(title),
                ))
                skills[growth.skill_name] = growth.new_value

            old_san = character.san
            new_san = old_san
            if report.sanity_loss > 0:
                new_san = apply_sanity_loss(old_san, report.sanity_loss)
                self.db.add(SanityHistory(
                    id=f"snh_{uuid.uuid4().hex[:12]}",
                    character_id=character.id,
                    session_id=session.id,
                    old_value=old_san,
                    new_value=new_san,
                    reason=sanity_loss_reason(title),
                ))

            insanity_count = 0
            for symptom in report.insanity_symptoms:
                name = (symptom.name or "").strip()
                if not name:
                    continue
                self.db.add(InsanitySymptom(
                    id=f"sym_{uuid.uuid4().hex[:12]}",
                    character_id=character.id,
                    session_id=session.id,
                    symptom_type=symptom.type,
                    symptom_name=name,
                    description=symptom.description or None,
                ))
                insanity_count += 1

            character.skills = skills
            character.san = new_san

        logger.info(
            f"Recorded session {session.id} for character {character_id}: "
            f"{len(report.skill_growth)} skills, SAN {old_san}->{new_san}, {insanity_count} symptoms"
        )
        return SessionRecordResult(
            session=session,
            scenario=scenario,
            character=character,
            skill_growth_count=len(report.skill_growth),
            sanity_loss=old_san - new_san,
            insanity_count=insanity_count,
        )

    def list_sessions(self, character_id: str) -> List[PlaySession]:
        """Sessions with their history, newest play date first."""
        self._get_character(character_id)
        return (
            self.db.query(PlaySession)
            .options(
                selectinload(PlaySession.skill_histories),
                selectinload(PlaySession.sanity_histories),
                selectinload(PlaySession.insanity_symptoms),
            )
            .filter(PlaySession.character_id == character_id)
            .order_by(PlaySession.play_date.desc(), PlaySession.created_at.desc())
            .all()
        )

    def delete_session(self, session_id: str):
        """Delete a session and its history. The character's values are left as they are."""
        session = self.db.query(PlaySession).filter(PlaySession.id == session_id).first()
        if not session:
            raise NotFoundError("Session not found")

        with atomic(self.db):
            self.db.delete(session)
        logger.info(f"Deleted session {session_id}")

    def set_symptom_recovery(self, symptom_id: str, recovered: bool) -> InsanitySymptom:
        symptom = self.db.query(InsanitySymptom).filter(InsanitySymptom.id == symptom_id).first()
        if not symptom:
            raise NotFoundError("Insanity symptom not found")

        with atomic(self.db):
            if recovered and not symptom.is_recovered:
                symptom.recovered_at = datetime.utcnow()
            elif not recovered:
                symptom.recovered_at = None
            symptom.is_recovered = recovered

        self.db.refresh(symptom)
        return symptom
