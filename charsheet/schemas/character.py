"""
Character Schemas
Pydantic models for character API requests and responses.
"""

from datetime import date, datetime
from typing import List, Optional, Dict, Literal

from pydantic import Field, NonNegativeInt, conint

from charsheet.schemas.base import ApiModel
from charsheet.schemas.image import CharacterImageResponse

SkillValue = conint(ge=0, le=99)
CharacterListStatus = Literal["new", "active", "inactive"]


class AbilityScores(ApiModel):
    """The nine ability scores, conventionally 0-99."""
    str: NonNegativeInt = 0
    con: NonNegativeInt = 0
    pow: NonNegativeInt = 0
    dex: NonNegativeInt = 0
    app: NonNegativeInt = 0
    siz: NonNegativeInt = 0
    int: NonNegativeInt = 0
    edu: NonNegativeInt = 0
    luck: NonNegativeInt = 0


class DerivedStats(ApiModel):
    """Hit points, magic points, sanity, movement rate and build."""
    hp: int = 0
    max_hp: int = 0
    mp: int = 0
    max_mp: int = 0
    san: int = 0
    max_san: int = 0
    mov: int = 0
    build: int = 0


class BasicInfo(ApiModel):
    """Identity block of a character."""
    name: str = ""
    occupation: Optional[str] = None
    age: Optional[NonNegativeInt] = None
    gender: Optional[str] = None
    birthplace: Optional[str] = None
    residence: Optional[str] = None


class CharacterCreate(BasicInfo):
    """
    Schema for character creation.

    Derived stats are computed from the ability scores when omitted;
    skills default to the base values of the catalog.
    """
    name: str = Field(..., min_length=1)
    stats: AbilityScores = Field(default_factory=AbilityScores)
    derived_stats: Optional[DerivedStats] = None
    skills: Optional[Dict[str, SkillValue]] = None
    memo: Optional[str] = None
    is_lost: bool = False


class CharacterUpdate(ApiModel):
    """Schema for character update. Only the fields sent are changed."""
    name: Optional[str] = Field(None, min_length=1)
    occupation: Optional[str] = None
    age: Optional[NonNegativeInt] = None
    gender: Optional[str] = None
    birthplace: Optional[str] = None
    residence: Optional[str] = None
    stats: Optional[AbilityScores] = None
    derived_stats: Optional[DerivedStats] = None
    skills: Optional[Dict[str, SkillValue]] = None
    memo: Optional[str] = None
    is_lost: Optional[bool] = None
    version_id: Optional[int] = None


class CharacterResponse(BasicInfo):
    """Schema for character response."""
    id: str
    stats: AbilityScores
    derived_stats: DerivedStats
    skills: Dict[str, int] = {}
    memo: Optional[str] = None
    is_lost: bool = False
    version_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class CharacterDetail(CharacterResponse):
    """Character with its portraits, oldest first."""
    images: List[CharacterImageResponse] = []


class CharacterSummary(ApiModel):
    """Row of the character list with values computed from its sessions."""
    id: str
    name: str
    occupation: Optional[str] = None
    age: Optional[int] = None
    san: int
    max_san: int
    is_lost: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None
    last_play_date: Optional[date] = None
    last_scenario: Optional[str] = None
    session_count: int = 0
    active_symptoms: int = 0
    status: CharacterListStatus


class CharacterImportRequest(ApiModel):
    """Raw text exported by the Iakyara character generator."""
    text: str = Field(..., min_length=1)


class ParsedCharacter(ApiModel):
    """Result of parsing an Iakyara text export."""
    basic_info: BasicInfo
    stats: AbilityScores
    skills: Dict[str, int]
    derived_stats: DerivedStats
    memo: str = ""


class SkillGrowthRollRequest(ApiModel):
    """Skills to roll growth checks for."""
    skills: List[str] = Field(..., min_length=1)


class SkillGrowthRoll(ApiModel):
    """Outcome of one growth check and, on success, its 1d10 increase."""
    skill_name: str
    old_value: int
    new_value: int
    check_roll: int
    increase: int = 0
    grown: bool


class SkillCatalogEntry(ApiModel):
    key: str
    label: str
    base_value: int
