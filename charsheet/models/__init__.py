# Database models package
from charsheet.models.character import Character
from charsheet.models.scenario import Scenario
from charsheet.models.session import (
    PlaySession,
    SkillHistory,
    SanityHistory,
    InsanitySymptom,
)
from charsheet.models.image import CharacterImage

__all__ = [
    "Character",
    "Scenario",
    "PlaySession",
    "SkillHistory",
    "SanityHistory",
    "InsanitySymptom",
    "CharacterImage",
]
