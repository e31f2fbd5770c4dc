from datetime import datetime, UTC
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.orm import relationship

from .base import Base

class User(Base):
    __tablename__ = "users"

    # Subject issued by the identity provider
    id = Column(String(255), primary_key=True)
    email = Column(String(255), unique=True, nullable=True)
    username = Column(String(100), unique=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    # Relationships
    flashcard_sets = relationship("FlashcardSet", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True)
    favorites = relationship("Favorite", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    collaborations = relationship("Collaborator", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    study_sessions = relationship("StudySession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    study_progress = relationship("StudyProgress", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
