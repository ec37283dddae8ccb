"""
Character Image Model
Portrait files stored through the storage service.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship

from charsheet.core.database import Base


class CharacterImage(Base):
    """Portrait asset of a character (at most five per character)."""

    __tablename__ = "character_images"

    id = Column(String, primary_key=True)  # img_xxxx format
    character_id = Column(String, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)

    filename = Column(String, nullable=False)  # storage key: characters/<id>/<uuid>.<ext>
    original_name = Column(String, nullable=False)
    file_path = Column(String, nullable=False)  # public URL
    image_name = Column(String, nullable=True)  # display label
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    character = relationship("Character", back_populates="images")
