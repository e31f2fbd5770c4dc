from .base import Base
from .enums import (
    PermissionLevel,
    AccessLevel,
    StudyMode,
    DifficultyRating
)
from .user import User
from .set import FlashcardSet
from .flashcard import Flashcard
from .sharing import Collaborator, Favorite, ShareLink
from .study import StudySession, StudyProgress

__all__ = [
    'Base',
    'PermissionLevel',
    'AccessLevel',
    'StudyMode',
    'DifficultyRating',
    'User',
    'FlashcardSet',
    'Flashcard',
    'Collaborator',
    'Favorite',
    'ShareLink',
    'StudySession',
    'StudyProgress',
]
