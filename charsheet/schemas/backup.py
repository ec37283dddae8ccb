"""
Backup Document Schemas
Versioned JSON format holding a character's full state and history.
Image bytes are not part of the document, only their metadata.
"""

from datetime import date, datetime
from typing import List, Optional, Dict, Any

from pydantic import field_validator

from charsheet.schemas.base import ApiModel
from charsheet.schemas.character import AbilityScores, DerivedStats
from charsheet.schemas.session import SymptomType


class BackupCharacter(ApiModel):
    id: Optional[str] = None
    name: str
    occupation: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    birthplace: Optional[str] = None
    residence: Optional[str] = None
    stats: AbilityScores
    derived_stats: DerivedStats
    skills: Dict[str, int] = {}
    # absent in documents written before these fields existed
    memo: Optional[str] = None
    is_lost: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BackupScenario(ApiModel):
    title: str
    author: Optional[str] = None
    description: Optional[str] = None


class BackupSkillHistory(ApiModel):
    skill_name: str
    old_value: int
    new_value: int
    reason: Optional[str] = None
    created_at: Optional[datetime] = None


class BackupSanityHistory(ApiModel):
    old_value: int
    new_value: int
    reason: Optional[str] = None
    created_at: Optional[datetime] = None


class BackupInsanitySymptom(ApiModel):
    symptom_type: SymptomType
    symptom_name: str
    description: Optional[str] = None
    is_recovered: bool = False
    recovered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class BackupSession(ApiModel):
    id: Optional[str] = None
    play_date: date
    kp_name: Optional[str] = None
    participants: Optional[str] = None
    memo: Optional[str] = None
    scenario: BackupScenario
    skill_histories: List[BackupSkillHistory] = []
    sanity_histories: List[BackupSanityHistory] = []
    insanity_symptoms: List[BackupInsanitySymptom] = []
    created_at: Optional[datetime] = None

    @field_validator("play_date", mode="before")
    @classmethod
    def date_part_only(cls, v: Any) -> Any:
        # older exports wrote play dates as full ISO datetimes
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        if isinstance(v, datetime):
            return v.date()
        return v


class BackupImage(ApiModel):
    id: Optional[str] = None
    filename: str
    original_name: str
    image_name: Optional[str] = None
    created_at: Optional[datetime] = None


class BackupStatistics(ApiModel):
    total_sessions: int = 0
    total_skill_growths: int = 0
    total_sanity_loss: int = 0
    total_insanity_symptoms: int = 0
    total_images: int = 0


class BackupDocument(ApiModel):
    version: str
    export_date: Optional[datetime] = None
    character: BackupCharacter
    sessions: List[BackupSession] = []
    images: List[BackupImage] = []
    statistics: Optional[BackupStatistics] = None

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, v: Any) -> Any:
        # any version marker is accepted and kept in its text form
        if v is not None and not isinstance(v, str):
            return str(v)
        return v


class RestoreResponse(ApiModel):
    message: str
    character_id: str
    restored_sessions: int
