"""
Scenario Model
Adventure modules, looked up by exact title when a session references them.
"""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import relationship

from charsheet.core.database import Base


class Scenario(Base):
    """Scenario model. Titles are indexed but not unique; the oldest row wins."""

    __tablename__ = "scenarios"

    id = Column(String, primary_key=True)  # scn_xxxx format
    title = Column(String, nullable=False, index=True)
    author = Column(String, nullable=True)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    sessions = relationship("PlaySession", back_populates="scenario")
