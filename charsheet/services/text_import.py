"""
Iakyara Text Import
Parses the plain-text export of the Iakyara character generator.

The export is line oriented and split into bracketed sections:

    【基本情報】   name, occupation, age/gender, birthplace
    【能力値】     STR 13, CON 12, ..., HP 13, 現在SAN値 60 / 99
    【技能値】     <label> <total> <initial> ...
    【メモ】       free text until the end of the document

Parsing is a small state machine. A header line moves the parser into its
section; every other line is handed to the handler of the current section.
MEMO is sticky: once its header is seen, every later non-empty line is
memo text. Header lines still switch sections and are never memo text, so
lines under a later section are both parsed and kept in the memo.
Unrecognised lines and labels are dropped silently, and the parser never
raises; a result without a name means the text was not an
Iakyara export.
"""

import logging
import re
from enum import Enum
from typing import Callable, Dict, List, Optional

from charsheet.schemas.character import AbilityScores, BasicInfo, DerivedStats, ParsedCharacter
from charsheet.services.rules import calculate_build, calculate_mov
from charsheet.services.skills import CTHULHU_MYTHOS, IAKYARA_SKILL_LABELS, default_skills

logger = logging.getLogger(__name__)


class Section(str, Enum):
    NONE = "none"
    BASIC = "basic"
    STATS = "stats"
    SKILLS = "skills"
    MEMO = "memo"


SECTION_HEADERS = {
    "【基本情報】": Section.BASIC,
    "【能力値】": Section.STATS,
    "【技能値】": Section.SKILLS,
    "【メモ】": Section.MEMO,
}

MYTHOS_LABEL = "クトゥルフ神話"

_SEP = r"\s*[:：]\s*"
NAME_RE = re.compile(r"^名前" + _SEP + r"(.+?)(?:\s*[(（].*[)）])?$")
OCCUPATION_RE = re.compile(r"^職業" + _SEP + r"(.*)$")
AGE_RE = re.compile(r"年齢" + _SEP + r"(\d+)")
GENDER_RE = re.compile(r"性別" + _SEP + r"([^/／\s]+)")
BIRTHPLACE_RE = re.compile(r"^出身" + _SEP + r"(.*)$")

STAT_RE = re.compile(r"^(STR|CON|POW|DEX|APP|SIZ|INT|EDU|HP|MP|SAN|幸運)\s+(\d+)")
MAX_SAN_RE = re.compile(r"現在SAN値\s+\d+\s*[/／]\s*(\d+)")

# label, total, then at least one more number (initial value etc.) which is ignored
SKILL_RE = re.compile(r"^(\S+(?:\s+\S+)*?)\s+(\d+)\s+\d+")
SPECIALISATION_RE = re.compile(r"[(（][^)）]*[)）]$")

STAT_FIELDS = {
    "STR": "str",
    "CON": "con",
    "POW": "pow",
    "DEX": "dex",
    "APP": "app",
    "SIZ": "siz",
    "INT": "int",
    "EDU": "edu",
    "幸運": "luck",
}


def _header_of(line: str) -> Optional[Section]:
    for marker, section in SECTION_HEADERS.items():
        if marker in line:
            return section
    return None


class IakyaraParser:
    """Single-use parser holding the state of one document."""

    def __init__(self):
        self.section = Section.NONE
        self.basic: Dict[str, object] = {"name": ""}
        self.stats: Dict[str, int] = {field: 0 for field in STAT_FIELDS.values()}
        self.derived: Dict[str, int] = {
            "hp": 0, "max_hp": 0, "mp": 0, "max_mp": 0, "san": 0, "max_san": 0,
        }
        self.skills: Dict[str, int] = default_skills()
        self.memo_lines: List[str] = []
        self.in_memo = False
        self._handlers: Dict[Section, Callable[[str], None]] = {
            Section.NONE: self._ignore,
            Section.BASIC: self._basic_line,
            Section.STATS: self._stats_line,
            Section.SKILLS: self._skill_line,
            Section.MEMO: self._ignore,
        }

    def feed(self, raw_line: str):
        line = raw_line.strip()

        header = _header_of(line)
        if header is not None:
            self.section = header
            if header is Section.MEMO:
                self.in_memo = True
            return

        self._handlers[self.section](line)
        # lines after the memo header are kept even when a later section parses them
        if self.in_memo and line:
            self.memo_lines.append(line)

    def result(self) -> ParsedCharacter:
        stats = AbilityScores(**self.stats)
        derived = DerivedStats(
            **self.derived,
            mov=calculate_mov(stats.str, stats.dex, stats.siz),
            build=calculate_build(stats.str + stats.siz),
        )
        return ParsedCharacter(
            basic_info=BasicInfo(**self.basic),
            stats=stats,
            skills=self.skills,
            derived_stats=derived,
            memo="\n".join(self.memo_lines),
        )

    # --- section handlers ---

    def _ignore(self, line: str):
        pass

    def _basic_line(self, line: str):
        match = NAME_RE.match(line)
        if match:
            self.basic["name"] = match.group(1).strip()
            return

        match = OCCUPATION_RE.match(line)
        if match:
            if match.group(1).strip():
                self.basic["occupation"] = match.group(1).strip()
            return

        # age and gender share one line: "年齢: 25 / 性別: 男性"
        if "年齢" in line:
            age = AGE_RE.search(line)
            if age:
                self.basic["age"] = int(age.group(1))
            gender = GENDER_RE.search(line)
            if gender:
                self.basic["gender"] = gender.group(1).strip()
            return

        match = BIRTHPLACE_RE.match(line)
        if match and match.group(1).strip():
            self.basic["birthplace"] = match.group(1).strip()

    def _stats_line(self, line: str):
        match = STAT_RE.match(line)
        if match:
            label, value = match.group(1), int(match.group(2))
            if label in STAT_FIELDS:
                self.stats[STAT_FIELDS[label]] = value
            elif label == "HP":
                self.derived["hp"] = self.derived["max_hp"] = value
            elif label == "MP":
                self.derived["mp"] = self.derived["max_mp"] = value
            elif label == "SAN":
                self.derived["san"] = value

        match = MAX_SAN_RE.search(line)
        if match:
            self.derived["max_san"] = int(match.group(1))

    def _skill_line(self, line: str):
        match = SKILL_RE.match(line)
        if not match:
            return

        label, total = match.group(1).strip(), int(match.group(2))
        if label == MYTHOS_LABEL:
            # mythos knowledge erodes maximum sanity
            self.skills[CTHULHU_MYTHOS] = total
            self.derived["max_san"] = max(0, self.derived["max_san"] - total)
            return

        key = IAKYARA_SKILL_LABELS.get(label)
        if key is None:
            # "母国語（日本語）" and similar specialisations map to their base skill
            key = IAKYARA_SKILL_LABELS.get(SPECIALISATION_RE.sub("", label).strip())
        if key is None:
            logger.debug(f"Skipping unknown skill label: {label}")
            return
        self.skills[key] = total


def parse_character_text(raw_text: str) -> ParsedCharacter:
    """Parse an Iakyara text export. Never raises; check ``basic_info.name``."""
    parser = IakyaraParser()
    for line in raw_text.splitlines():
        parser.feed(line)
    return parser.result()
