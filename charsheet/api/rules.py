"""
Rules API Routes
Stateless helpers for the character creation form.
"""

from typing import List

from fastapi import APIRouter

from charsheet.schemas.character import AbilityScores, DerivedStats, SkillCatalogEntry
from charsheet.services.rules import derive_stats
from charsheet.services.skills import DEFAULT_SKILLS, skill_label

router = APIRouter()


@router.post("/derived-stats", response_model=DerivedStats)
async def compute_derived_stats(scores: AbilityScores):
    """Derived values for a set of ability scores."""
    return derive_stats(scores)


@router.get("/skills", response_model=List[SkillCatalogEntry])
async def list_skills():
    """Known skills with their display labels and base values."""
    return [
        SkillCatalogEntry(key=key, label=skill_label(key), base_value=base)
        for key, base in DEFAULT_SKILLS.items()
    ]
