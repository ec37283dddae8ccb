"""
Investigator Rules
Derived values from ability scores, and the arithmetic of skill growth and
sanity loss. Everything here is pure; dice take an optional random source
so callers and tests can make rolls reproducible.
"""

import math
import random
from typing import Mapping, Optional, Union

from charsheet.schemas.character import AbilityScores, DerivedStats, SkillGrowthRoll

# Growth never takes a skill past this value
SKILL_GROWTH_CAP = 90

SAN_PER_POW = 5

# Upper bounds of STR+SIZ for each build step; above the last one build is 6
BUILD_BREAKPOINTS = (
    (64, -2),
    (84, -1),
    (124, 0),
    (164, 1),
    (204, 2),
    (284, 3),
    (364, 4),
    (444, 5),
)
MAX_BUILD = 6


def calculate_mov(strength: int, dex: int, siz: int) -> int:
    """Movement rate: 9 when DEX and STR both exceed SIZ, 7 when both are below, else 8."""
    if dex < siz and strength < siz:
        return 7
    if dex > siz and strength > siz:
        return 9
    return 8


def calculate_build(str_plus_siz: int) -> int:
    for upper, build in BUILD_BREAKPOINTS:
        if str_plus_siz <= upper:
            return build
    return MAX_BUILD


def derive_stats(scores: Union[AbilityScores, Mapping[str, int]]) -> DerivedStats:
    """
    Compute derived values from ability scores.

    HP is (CON+SIZ)/2 rounded up, MP equals POW, sanity starts at POW*5
    (before any reduction for Cthulhu Mythos). Accepts a plain mapping too;
    out-of-range or negative scores are not rejected here.
    """
    if isinstance(scores, AbilityScores):
        scores = scores.model_dump()
    strength = scores.get("str", 0)
    con = scores.get("con", 0)
    pow_ = scores.get("pow", 0)
    dex = scores.get("dex", 0)
    siz = scores.get("siz", 0)

    hp = math.ceil((con + siz) / 2)
    mp = pow_
    san = pow_ * SAN_PER_POW
    return DerivedStats(
        hp=hp,
        max_hp=hp,
        mp=mp,
        max_mp=mp,
        san=san,
        max_san=san,
        mov=calculate_mov(strength, dex, siz),
        build=calculate_build(strength + siz),
    )


def roll_d100(rng: Optional[random.Random] = None) -> int:
    return (rng or random).randint(1, 100)


def roll_skill_growth(current_value: int, rng: Optional[random.Random] = None) -> bool:
    """Growth check: succeeds when 1d100 exceeds the current value. Capped skills never grow."""
    if current_value >= SKILL_GROWTH_CAP:
        return False
    return roll_d100(rng) > current_value


def roll_skill_increase(rng: Optional[random.Random] = None) -> int:
    """1d10 increase applied after a successful growth check."""
    return (rng or random).randint(1, 10)


def apply_skill_growth(current_value: int, increase: int) -> int:
    return min(current_value + increase, SKILL_GROWTH_CAP)


def apply_sanity_loss(san: int, loss: int) -> int:
    return max(0, san - loss)


def grow_skill(skill_name: str, current_value: int, rng: Optional[random.Random] = None) -> SkillGrowthRoll:
    """Roll the growth check for one skill and, on success, its increase."""
    if current_value >= SKILL_GROWTH_CAP:
        return SkillGrowthRoll(
            skill_name=skill_name,
            old_value=current_value,
            new_value=current_value,
            check_roll=0,
            grown=False,
        )

    check = roll_d100(rng)
    if check <= current_value:
        return SkillGrowthRoll(
            skill_name=skill_name,
            old_value=current_value,
            new_value=current_value,
            check_roll=check,
            grown=False,
        )

    increase = roll_skill_increase(rng)
    return SkillGrowthRoll(
        skill_name=skill_name,
        old_value=current_value,
        new_value=apply_skill_growth(current_value, increase),
        check_roll=check,
        increase=increase,
        grown=True,
    )
