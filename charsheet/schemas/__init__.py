# Pydantic schemas package
from charsheet.schemas.character import (
    AbilityScores, DerivedStats, BasicInfo,
    CharacterCreate, CharacterUpdate, CharacterResponse, CharacterDetail, CharacterSummary,
    CharacterImportRequest, ParsedCharacter, SkillGrowthRollRequest, SkillGrowthRoll, SkillCatalogEntry,
)
from charsheet.schemas.image import CharacterImageResponse, CharacterImageRename, ImageDeleteResponse
from charsheet.schemas.session import (
    SessionReport, SkillGrowthEntry, InsanitySymptomEntry,
    SessionResponse, SessionRecordResponse, SessionSummary, ScenarioResponse,
    InsanitySymptomResponse, SymptomRecoveryUpdate,
)
from charsheet.schemas.backup import BackupDocument, RestoreResponse

__all__ = [
    "AbilityScores", "DerivedStats", "BasicInfo",
    "CharacterCreate", "CharacterUpdate", "CharacterResponse", "CharacterDetail", "CharacterSummary",
    "CharacterImportRequest", "ParsedCharacter", "SkillGrowthRollRequest", "SkillGrowthRoll", "SkillCatalogEntry",
    "CharacterImageResponse", "CharacterImageRename", "ImageDeleteResponse",
    # Session schemas
    "SessionReport", "SkillGrowthEntry", "InsanitySymptomEntry",
    "SessionResponse", "SessionRecordResponse", "SessionSummary", "ScenarioResponse",
    "InsanitySymptomResponse", "SymptomRecoveryUpdate",
    "BackupDocument", "RestoreResponse",
]
