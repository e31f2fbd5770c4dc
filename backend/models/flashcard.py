from datetime import datetime, UTC
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Index
from sqlalchemy.orm import relationship

from .base import Base

class Flashcard(Base):
    __tablename__ = "flashcards"

    id = Column(Integer, primary_key=True)
    set_id = Column(Integer, ForeignKey('flashcard_sets.id', ondelete='CASCADE'), nullable=False)
    term = Column(String(500), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(Text, nullable=True)
    review_notes = Column(Text, nullable=True)  # Optional AI-generated notes

    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    __table_args__ = (
        Index('ix_flashcards_set_id', 'set_id'),
    )

    # Relationships
    flashcard_set = relationship("FlashcardSet", back_populates="flashcards")
    progress = relationship("StudyProgress", back_populates="flashcard", cascade="all, delete-orphan", passive_deletes=True)
