from datetime import datetime, UTC
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, JSON, Boolean, Index
from sqlalchemy.orm import relationship

from .base import Base

class FlashcardSet(Base):
    __tablename__ = "flashcard_sets"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String(255), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    tags = Column(JSON, nullable=False, default=list)  # Unordered, de-duplicated list of strings
    is_public = Column(Boolean, nullable=False, default=False)
    is_collaborative = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    __table_args__ = (
        Index('ix_flashcard_sets_owner_id', 'owner_id'),
    )

    # Relationships
    owner = relationship("User", back_populates="flashcard_sets")
    flashcards = relationship(
        "Flashcard",
        back_populates="flashcard_set",
        order_by="Flashcard.id",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
    collaborators = relationship("Collaborator", back_populates="flashcard_set", cascade="all, delete-orphan", passive_deletes=True)
    favorites = relationship("Favorite", back_populates="flashcard_set", cascade="all, delete-orphan", passive_deletes=True)
    share_links = relationship("ShareLink", back_populates="flashcard_set", cascade="all, delete-orphan", passive_deletes=True)
    study_sessions = relationship("StudySession", back_populates="flashcard_set", cascade="all, delete-orphan", passive_deletes=True)
