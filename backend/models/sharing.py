from datetime import datetime, UTC
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base
from .enums import PermissionLevel

class Collaborator(Base):
    __tablename__ = "collaborators"

    id = Column(Integer, primary_key=True)
    set_id = Column(Integer, ForeignKey('flashcard_sets.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(String(255), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    permission = Column(String(20), nullable=False, default=PermissionLevel.VIEWER.value)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    __table_args__ = (
        UniqueConstraint('set_id', 'user_id', name='uq_collaborator_set_user'),
    )

    # Relationships
    flashcard_set = relationship("FlashcardSet", back_populates="collaborators")
    user = relationship("User", back_populates="collaborations")

    @property
    def permission_level(self) -> PermissionLevel:
        return PermissionLevel.parse(self.permission)

class Favorite(Base):
    __tablename__ = "favorites"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(255), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    set_id = Column(Integer, ForeignKey('flashcard_sets.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    __table_args__ = (
        UniqueConstraint('user_id', 'set_id', name='uq_favorite_user_set'),
    )

    # Relationships
    user = relationship("User", back_populates="favorites")
    flashcard_set = relationship("FlashcardSet", back_populates="favorites")

class ShareLink(Base):
    __tablename__ = "shared_links"

    id = Column(Integer, primary_key=True)
    set_id = Column(Integer, ForeignKey('flashcard_sets.id', ondelete='CASCADE'), nullable=False)
    created_by = Column(String(255), nullable=False)  # Not a foreign key; links outlive their creator's grant
    share_token = Column(String(64), unique=True, nullable=False)
    expires_at = Column(DateTime, nullable=True)  # Stored as naive UTC
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    # Relationships
    flashcard_set = relationship("FlashcardSet", back_populates="share_links")
