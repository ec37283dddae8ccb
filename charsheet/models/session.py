"""
Play Session Models
One played sitting of a scenario, and the audit trail written with it.
"""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Date, Integer, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from charsheet.core.database import Base


class PlaySession(Base):
    """Play session model."""

    __tablename__ = "sessions"

    id = Column(String, primary_key=True)  # sess_xxxx format
    character_id = Column(String, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)
    scenario_id = Column(String, ForeignKey("scenarios.id"), nullable=False)

    kp_name = Column(String, nullable=True)
    play_date = Column(Date, nullable=False)
    participants = Column(Text, nullable=True)
    memo = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    character = relationship("Character", back_populates="sessions")
    scenario = relationship("Scenario", back_populates="sessions", lazy="joined")
    skill_histories = relationship(
        "SkillHistory", back_populates="session",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="SkillHistory.created_at",
    )
    sanity_histories = relationship(
        "SanityHistory", back_populates="session",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="SanityHistory.created_at",
    )
    insanity_symptoms = relationship(
        "InsanitySymptom", back_populates="session",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="InsanitySymptom.created_at",
    )


class SkillHistory(Base):
    """Before/after value of one skill changed in a session. Never updated."""

    __tablename__ = "skill_histories"

    id = Column(String, primary_key=True)
    character_id = Column(String, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(String, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True)

    skill_name = Column(String, nullable=False)
    old_value = Column(Integer, nullable=False)
    new_value = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    session = relationship("PlaySession", back_populates="skill_histories")


class SanityHistory(Base):
    """Before/after sanity within a session. Never updated."""

    __tablename__ = "sanity_histories"

    id = Column(String, primary_key=True)
    character_id = Column(String, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(String, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True)

    old_value = Column(Integer, nullable=False)
    new_value = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    session = relationship("PlaySession", back_populates="sanity_histories")


class InsanitySymptom(Base):
    """
    Madness manifestation recorded in a session.

    Only is_recovered / recovered_at change after creation.
    """

    __tablename__ = "insanity_symptoms"

    id = Column(String, primary_key=True)
    character_id = Column(String, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(String, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True)

    symptom_type = Column(String, nullable=False)  # indefinite | phobia | mania
    symptom_name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_recovered = Column(Boolean, nullable=False, default=False)
    recovered_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    session = relationship("PlaySession", back_populates="insanity_symptoms")
