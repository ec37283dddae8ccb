"""
Session Schemas
Pydantic models for the session report and the session history read-model.
"""

from datetime import date, datetime
from typing import List, Optional, Literal

from pydantic import Field, NonNegativeInt, conint

from charsheet.schemas.base import ApiModel
from charsheet.schemas.character import CharacterResponse

SymptomType = Literal["indefinite", "phobia", "mania"]


class SkillGrowthEntry(ApiModel):
    """A skill that changed during the session."""
    skill_name: str = Field(..., min_length=1)
    old_value: conint(ge=0, le=99)
    new_value: conint(ge=0, le=99)


class InsanitySymptomEntry(ApiModel):
    """A madness symptom as entered; entries with a blank name are skipped."""
    type: SymptomType
    name: str = ""
    description: Optional[str] = None


class SessionReport(ApiModel):
    """Everything a player reports after a played session."""
    scenario_title: str = ""
    kp_name: Optional[str] = None
    play_date: date = Field(default_factory=date.today)
    participants: Optional[str] = None
    memo: Optional[str] = None
    skill_growth: List[SkillGrowthEntry] = []
    sanity_loss: NonNegativeInt = 0
    insanity_symptoms: List[InsanitySymptomEntry] = []


class ScenarioResponse(ApiModel):
    id: str
    title: str
    author: Optional[str] = None
    description: Optional[str] = None


class SkillHistoryResponse(ApiModel):
    id: str
    skill_name: str
    old_value: int
    new_value: int
    reason: Optional[str] = None
    created_at: datetime


class SanityHistoryResponse(ApiModel):
    id: str
    old_value: int
    new_value: int
    reason: Optional[str] = None
    created_at: datetime


class InsanitySymptomResponse(ApiModel):
    id: str
    session_id: str
    symptom_type: SymptomType
    symptom_name: str
    description: Optional[str] = None
    is_recovered: bool = False
    recovered_at: Optional[datetime] = None
    created_at: datetime


class SymptomRecoveryUpdate(ApiModel):
    is_recovered: bool


class SessionResponse(ApiModel):
    """A session with its scenario and full audit trail."""
    id: str
    character_id: str
    scenario: ScenarioResponse
    kp_name: Optional[str] = None
    play_date: date
    participants: Optional[str] = None
    memo: Optional[str] = None
    skill_histories: List[SkillHistoryResponse] = []
    sanity_histories: List[SanityHistoryResponse] = []
    insanity_symptoms: List[InsanitySymptomResponse] = []
    created_at: datetime


class SessionSummary(ApiModel):
    skill_growth_count: int
    sanity_loss: int
    insanity_count: int


class SessionRecordResponse(ApiModel):
    """Result of recording a session."""
    session: SessionResponse
    scenario: ScenarioResponse
    character: CharacterResponse
    summary: SessionSummary
