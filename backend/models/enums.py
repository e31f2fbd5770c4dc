import enum

class PermissionLevel(enum.Enum):
    """Level stored on a collaborator grant."""
    VIEWER = "viewer"
    EDITOR = "editor"
    OWNER = "owner"

    @classmethod
    def parse(cls, value: str) -> "PermissionLevel":
        """Map a canonical or legacy permission name onto the canonical enum.

        Raises:
            ValueError: If the value is not a recognised permission name
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        normalized = _LEGACY_PERMISSION_NAMES.get(normalized, normalized)
        return cls(normalized)

    @property
    def access_level(self) -> "AccessLevel":
        return AccessLevel(self.value)

class AccessLevel(enum.Enum):
    """Effective access a caller has on a set, ordered from weakest to strongest."""
    NONE = "none"
    PUBLIC = "public"  # Anonymous share-token access
    VIEWER = "viewer"
    EDITOR = "editor"
    OWNER = "owner"

    @property
    def rank(self) -> int:
        return _ACCESS_RANK[self]

    def at_least(self, other: "AccessLevel") -> bool:
        return self.rank >= other.rank

class StudyMode(enum.Enum):
    FLASHCARD = "flashcard"
    MULTIPLE_CHOICE = "multiple_choice"
    WRITTEN = "written"
    MATCHING = "matching"
    TEST = "test"

class DifficultyRating(enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

# Older clients sent read/write/admin
_LEGACY_PERMISSION_NAMES = {
    "read": PermissionLevel.VIEWER.value,
    "write": PermissionLevel.EDITOR.value,
    "admin": PermissionLevel.OWNER.value,
}

_ACCESS_RANK = {
    AccessLevel.NONE: 0,
    AccessLevel.PUBLIC: 1,
    AccessLevel.VIEWER: 2,
    AccessLevel.EDITOR: 3,
    AccessLevel.OWNER: 4,
}
