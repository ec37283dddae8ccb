"""
Character Model
Database model for an investigator sheet: ability scores, derived values and skills.
"""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Integer, Boolean, JSON
from sqlalchemy.orm import relationship

from charsheet.core.database import Base

ABILITY_SCORE_FIELDS = ("str", "con", "pow", "dex", "app", "siz", "int", "edu", "luck")
DERIVED_STAT_FIELDS = ("hp", "max_hp", "mp", "max_mp", "san", "max_san", "mov", "build")
IDENTITY_FIELDS = ("name", "occupation", "age", "gender", "birthplace", "residence")


class Character(Base):
    """Investigator sheet model."""

    __tablename__ = "characters"

    id = Column(String, primary_key=True)  # char_xxxx format

    # Identity
    name = Column(String, nullable=False)
    occupation = Column(String, nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(String, nullable=True)
    birthplace = Column(String, nullable=True)
    residence = Column(String, nullable=True)

    # Ability scores
    str = Column(Integer, nullable=False, default=0)
    con = Column(Integer, nullable=False, default=0)
    pow = Column(Integer, nullable=False, default=0)
    dex = Column(Integer, nullable=False, default=0)
    app = Column(Integer, nullable=False, default=0)
    siz = Column(Integer, nullable=False, default=0)
    int = Column(Integer, nullable=False, default=0)
    edu = Column(Integer, nullable=False, default=0)
    luck = Column(Integer, nullable=False, default=0)

    # Derived values (current and maximum)
    hp = Column(Integer, nullable=False, default=0)
    max_hp = Column(Integer, nullable=False, default=0)
    mp = Column(Integer, nullable=False, default=0)
    max_mp = Column(Integer, nullable=False, default=0)
    san = Column(Integer, nullable=False, default=0)
    max_san = Column(Integer, nullable=False, default=0)
    mov = Column(Integer, nullable=False, default=8)
    build = Column(Integer, nullable=False, default=0)

    # skill key -> percentile; always reassigned, never mutated in place
    skills = Column(JSON, nullable=False, default=dict)

    memo = Column(Text, nullable=True)
    is_lost = Column(Boolean, nullable=False, default=False)

    # Optimistic concurrency counter, bumped on every UPDATE of this row
    version_id = Column(Integer, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    sessions = relationship(
        "PlaySession",
        back_populates="character",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PlaySession.play_date.desc()",
    )
    images = relationship(
        "CharacterImage",
        back_populates="character",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CharacterImage.created_at",
    )
    skill_histories = relationship("SkillHistory", viewonly=True)
    sanity_histories = relationship("SanityHistory", viewonly=True)
    insanity_symptoms = relationship("InsanitySymptom", viewonly=True)

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def stats(self):
        """The nine ability scores as a mapping."""
        return {field: getattr(self, field) for field in ABILITY_SCORE_FIELDS}

    @property
    def derived_stats(self):
        """Current and maximum derived values as a mapping."""
        return {field: getattr(self, field) for field in DERIVED_STAT_FIELDS}

    def apply_stats(self, stats: dict):
        for field in ABILITY_SCORE_FIELDS:
            if field in stats:
                setattr(self, field, stats[field])

    def apply_derived_stats(self, derived: dict):
        for field in DERIVED_STAT_FIELDS:
            if field in derived:
                setattr(self, field, derived[field])
