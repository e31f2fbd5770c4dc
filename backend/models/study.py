from datetime import datetime, UTC
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from .base import Base
from .enums import DifficultyRating

class StudySession(Base):
    __tablename__ = "study_sessions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(255), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    set_id = Column(Integer, ForeignKey('flashcard_sets.id', ondelete='CASCADE'), nullable=False)
    mode = Column(String(20), nullable=False)

    # Outcome counters, overwritten when the session ends
    cards_studied = Column(Integer, nullable=False, default=0)
    correct_answers = Column(Integer, nullable=False, default=0)
    total_time_seconds = Column(Integer, nullable=False, default=0)

    started_at = Column(DateTime, default=lambda: datetime.now(UTC))
    completed_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index('ix_study_sessions_user_set', 'user_id', 'set_id'),
    )

    # Relationships
    user = relationship("User", back_populates="study_sessions")
    flashcard_set = relationship("FlashcardSet", back_populates="study_sessions")

class StudyProgress(Base):
    __tablename__ = "study_progress"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(255), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    flashcard_id = Column(Integer, ForeignKey('flashcards.id', ondelete='CASCADE'), nullable=False)
    correct_count = Column(Integer, nullable=False, default=0)
    incorrect_count = Column(Integer, nullable=False, default=0)
    last_studied = Column(DateTime, default=lambda: datetime.now(UTC))
    difficulty_rating = Column(String(10), nullable=False, default=DifficultyRating.MEDIUM.value)

    __table_args__ = (
        UniqueConstraint('user_id', 'flashcard_id', name='uq_study_progress_user_flashcard'),
    )

    # Relationships
    user = relationship("User", back_populates="study_progress")
    flashcard = relationship("Flashcard", back_populates="progress")
