"""
Skill Catalog
Known skill keys with their base values, display labels, and the label table
used when importing Iakyara text exports. Keys outside the catalog are kept
as homebrew skills.
"""

from typing import Dict

CTHULHU_MYTHOS = "cthulhuMythos"

# Base values of a fresh investigator (6th edition)
DEFAULT_SKILLS: Dict[str, int] = {
    # Combat
    "dodge": 0,
    "fight": 25,
    "firearms": 20,
    # Investigation
    "accounting": 5,
    "anthropology": 1,
    "archaeology": 1,
    "art": 5,
    "charm": 15,
    "climb": 20,
    "creditRating": 0,
    CTHULHU_MYTHOS: 0,
    "disguise": 5,
    "electricalRepair": 10,
    "fastTalk": 5,
    "firstAid": 30,
    "history": 5,
    "intimidate": 15,
    "jump": 20,
    "languageOwn": 0,  # derived from EDU
    "law": 5,
    "libraryUse": 20,
    "listen": 20,
    "locksmith": 1,
    "mechanicalRepair": 10,
    "medicine": 1,
    "naturalHistory": 10,
    "navigate": 10,
    "occult": 5,
    "operateHeavyMachinery": 1,
    "persuade": 10,
    "psychology": 10,
    "psychoanalysis": 1,
    "ride": 5,
    "science": 1,
    "sleightOfHand": 10,
    "spotHidden": 25,
    "stealth": 20,
    "survival": 10,
    "swim": 20,
    "throw": 20,
    "track": 10,
}

SKILL_NAMES_JA: Dict[str, str] = {
    "dodge": "回避",
    "fight": "こぶし（パンチ）",
    "firearms": "拳銃",
    "accounting": "経理",
    "anthropology": "人類学",
    "archaeology": "考古学",
    "art": "芸術",
    "charm": "信用",
    "climb": "登攀",
    "creditRating": "信用度",
    CTHULHU_MYTHOS: "クトゥルフ神話",
    "disguise": "変装",
    "electricalRepair": "電気修理",
    "fastTalk": "言いくるめ",
    "firstAid": "応急手当",
    "history": "歴史",
    "intimidate": "威圧",
    "jump": "跳躍",
    "languageOwn": "母国語（日本語）",
    "law": "法律",
    "libraryUse": "図書館",
    "listen": "聞き耳",
    "locksmith": "鍵開け",
    "mechanicalRepair": "機械修理",
    "medicine": "医学",
    "naturalHistory": "博物学",
    "navigate": "ナビゲート",
    "occult": "オカルト",
    "operateHeavyMachinery": "重機械操作",
    "persuade": "説得",
    "psychology": "心理学",
    "psychoanalysis": "精神分析",
    "ride": "乗馬",
    "science": "生物学",
    "sleightOfHand": "しのび歩き",
    "spotHidden": "目星",
    "stealth": "隠れる",
    "survival": "サバイバル",
    "swim": "水泳",
    "throw": "投擲",
    "track": "追跡",
}

# Iakyara export label -> catalog key. Cthulhu Mythos is handled by the parser itself.
IAKYARA_SKILL_LABELS: Dict[str, str] = {
    "回避": "dodge",
    "こぶし（パンチ）": "fight",
    "拳銃": "firearms",
    "経理": "accounting",
    "人類学": "anthropology",
    "考古学": "archaeology",
    "芸術": "art",
    "信用": "charm",
    "登攀": "climb",
    "変装": "disguise",
    "電気修理": "electricalRepair",
    "言いくるめ": "fastTalk",
    "応急手当": "firstAid",
    "歴史": "history",
    "跳躍": "jump",
    "母国語": "languageOwn",
    "法律": "law",
    "図書館": "libraryUse",
    "聞き耳": "listen",
    "鍵開け": "locksmith",
    "機械修理": "mechanicalRepair",
    "医学": "medicine",
    "博物学": "naturalHistory",
    "ナビゲート": "navigate",
    "オカルト": "occult",
    "重機械操作": "operateHeavyMachinery",
    "説得": "persuade",
    "心理学": "psychology",
    "精神分析": "psychoanalysis",
    "乗馬": "ride",
    "化学": "science",
    "隠す": "sleightOfHand",
    "目星": "spotHidden",
    "忍び歩き": "stealth",
    "水泳": "swim",
    "投擲": "throw",
    "追跡": "track",
}


def default_skills() -> Dict[str, int]:
    """Fresh copy of the catalog's base values."""
    return dict(DEFAULT_SKILLS)


def skill_label(key: str) -> str:
    """Japanese display label, or the key itself for homebrew skills."""
    return SKILL_NAMES_JA.get(key, key)
