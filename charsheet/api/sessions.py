"""
Sessions API Routes
Records played sessions and exposes the resulting history.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from charsheet.api.deps import get_db
from charsheet.schemas.character import CharacterResponse
from charsheet.schemas.session import (
    ScenarioResponse,
    InsanitySymptomResponse,
    SessionRecordResponse,
    SessionReport,
    SessionResponse,
    SessionSummary,
    SymptomRecoveryUpdate,
)
from charsheet.services.session_recorder import SessionRecorder

# mounted under /characters
character_router = APIRouter()
# mounted at the API root
router = APIRouter()


@character_router.post(
    "/{character_id}/sessions",
    response_model=SessionRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_session(
    character_id: str,
    report: SessionReport,
    db: Session = Depends(get_db),
):
    """
    Record a played session.

    Creates the session (and its scenario if new), writes skill and sanity
    history, records insanity symptoms, and updates the character's skills
    and SAN, all in one transaction.
    """
    result = SessionRecorder(db).record(character_id, report)
    return SessionRecordResponse(
        session=SessionResponse.model_validate(result.session),
        scenario=ScenarioResponse.model_validate(result.scenario),
        character=CharacterResponse.model_validate(result.character),
        summary=SessionSummary(**result.summary),
    )


@character_router.get("/{character_id}/sessions", response_model=List[SessionResponse])
async def list_sessions(
    character_id: str,
    db: Session = Depends(get_db),
):
    """List a character's sessions with their history, newest first."""
    return SessionRecorder(db).list_sessions(character_id)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    db: Session = Depends(get_db),
):
    """Delete a session together with its skill, sanity and symptom records."""
    SessionRecorder(db).delete_session(session_id)
    return None


@router.patch("/symptoms/{symptom_id}", response_model=InsanitySymptomResponse)
async def update_symptom_recovery(
    symptom_id: str,
    body: SymptomRecoveryUpdate,
    db: Session = Depends(get_db),
):
    """Mark an insanity symptom as recovered, or as active again."""
    return SessionRecorder(db).set_symptom_recovery(symptom_id, body.is_recovered)
