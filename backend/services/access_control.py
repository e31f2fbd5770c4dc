from sqlalchemy import or_, select
from sqlalchemy.orm import Session
from typing import Optional

from models.set import FlashcardSet
from models.flashcard import Flashcard
from models.sharing import Collaborator
from models.enums import AccessLevel
from api.errors import Forbidden, NotFound, SET_NOT_FOUND, FLASHCARD_NOT_FOUND

class AccessControlService:
    """Resolves what a caller may do with a flashcard set.

    Every read or write of a set or its cards goes through here so that
    ownership, collaborator grants and public visibility are combined the
    same way everywhere.
    """

    def __init__(self, db: Session):
        self.db = db

    def grant_for(self, user_id: Optional[str], set_id: int) -> Optional[Collaborator]:
        if not user_id:
            return None
        return self.db.query(Collaborator).filter(
            Collaborator.set_id == set_id,
            Collaborator.user_id == user_id
        ).first()

    def member_level(self, user_id: Optional[str], flashcard_set: FlashcardSet) -> AccessLevel:
        """Access through ownership or a stored grant only, ignoring public visibility."""
        if user_id and flashcard_set.owner_id == user_id:
            return AccessLevel.OWNER
        grant = self.grant_for(user_id, flashcard_set.id)
        if grant is not None:
            return grant.permission_level.access_level
        return AccessLevel.NONE

    def resolve_access(self, user_id: Optional[str], flashcard_set: FlashcardSet) -> AccessLevel:
        """Return the caller's effective access to a set.

        The owner always resolves to owner, even if a grant exists for the same
        user. Public sets give everyone at least viewer; a grant can only raise that.
        """
        level = self.member_level(user_id, flashcard_set)
        if flashcard_set.is_public and not level.at_least(AccessLevel.VIEWER):
            return AccessLevel.VIEWER
        return level

    def get_set_for(
        self,
        user_id: Optional[str],
        set_id: int,
        minimum: AccessLevel = AccessLevel.VIEWER
    ) -> tuple[FlashcardSet, AccessLevel]:
        """Load a set and check the caller reaches ``minimum``.

        Raises:
            NotFound: If the set does not exist or the caller cannot see it
            Forbidden: If the caller can see the set but lacks ``minimum``
        """
        flashcard_set = self.db.get(FlashcardSet, set_id)
        if not flashcard_set:
            raise NotFound(SET_NOT_FOUND)

        level = self.resolve_access(user_id, flashcard_set)
        if level == AccessLevel.NONE:
            raise NotFound(SET_NOT_FOUND)
        if not level.at_least(minimum):
            raise Forbidden(_denied_message(minimum))
        return flashcard_set, level

    def get_flashcard_for(
        self,
        user_id: Optional[str],
        flashcard_id: int,
        minimum: AccessLevel = AccessLevel.VIEWER
    ) -> tuple[Flashcard, AccessLevel]:
        """Load a flashcard and check access through its set."""
        flashcard = self.db.get(Flashcard, flashcard_id)
        if not flashcard:
            raise NotFound(FLASHCARD_NOT_FOUND)

        level = self.resolve_access(user_id, flashcard.flashcard_set)
        if level == AccessLevel.NONE:
            raise NotFound(FLASHCARD_NOT_FOUND)
        if not level.at_least(minimum):
            raise Forbidden(_denied_message(minimum))
        return flashcard, level

    def require_true_owner(self, user_id: Optional[str], set_id: int) -> FlashcardSet:
        """Load a set the caller owns outright.

        A collaborator holding an owner grant is still refused: deleting the set,
        managing collaborators and revoking links stay with ``owner_id``.
        """
        flashcard_set, _ = self.get_set_for(user_id, set_id, AccessLevel.VIEWER)
        if flashcard_set.owner_id != user_id:
            raise Forbidden("Only the set owner can do this")
        return flashcard_set

    def visible_sets_filter(self, user_id: Optional[str]):
        """SQL predicate selecting the sets a caller may list."""
        if not user_id:
            return FlashcardSet.is_public.is_(True)
        granted = select(Collaborator.set_id).where(Collaborator.user_id == user_id)
        return or_(
            FlashcardSet.owner_id == user_id,
            FlashcardSet.is_public.is_(True),
            FlashcardSet.id.in_(granted)
        )

def _denied_message(minimum: AccessLevel) -> str:
    if minimum == AccessLevel.OWNER:
        return "Owner access required"
    if minimum == AccessLevel.EDITOR:
        return "Edit access required"
    return "Access denied"
