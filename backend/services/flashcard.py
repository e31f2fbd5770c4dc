from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from models.flashcard import Flashcard
from models.enums import AccessLevel
from services.access_control import AccessControlService
from database import commit_with_retry
from api.errors import InternalError, InvalidInput
from api.models.requests.flashcard import FlashcardCreate, FlashcardUpdate
from api.models.requests.flashcard_set import FlashcardContent
from api.models.responses.flashcard import FlashcardResponse

logger = logging.getLogger(__name__)

class FlashcardService:
    def __init__(self, db: Session):
        self.db = db
        self.access = AccessControlService(db)

    def _commit(self, apply, action: str):
        try:
            return commit_with_retry(self.db, apply)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {str(e)}")
            raise InternalError(f"Failed to {action}")

    def list_for_set(self, user_id: Optional[str], set_id: int) -> List[FlashcardResponse]:
        """Cards of a set in creation order."""
        flashcard_set, _ = self.access.get_set_for(user_id, set_id, AccessLevel.VIEWER)
        return [FlashcardResponse.model_validate(card) for card in flashcard_set.flashcards]

    def create_flashcard(self, user_id: str, card: FlashcardCreate) -> FlashcardResponse:
        """Add a card to a set the caller can edit."""
        self.access.get_set_for(user_id, card.set_id, AccessLevel.EDITOR)

        flashcard = Flashcard(
            set_id=card.set_id,
            term=card.term,
            description=card.description,
            image_url=card.image_url,
            review_notes=card.review_notes
        )

        def apply():
            self.db.add(flashcard)
            return flashcard

        self._commit(apply, "create flashcard")
        self.db.refresh(flashcard)
        return FlashcardResponse.model_validate(flashcard)

    def bulk_create(
        self,
        user_id: str,
        set_id: int,
        cards: List[FlashcardContent]
    ) -> List[FlashcardResponse]:
        """Add several cards to a set in one transaction, keeping their order."""
        self.access.get_set_for(user_id, set_id, AccessLevel.EDITOR)
        if not cards:
            raise InvalidInput("Flashcards array is required")

        flashcards = [
            Flashcard(
                set_id=set_id,
                term=card.term,
                description=card.description,
                image_url=card.image_url
            )
            for card in cards
        ]

        def apply():
            self.db.add_all(flashcards)
            return flashcards

        self._commit(apply, "create flashcards")
        for flashcard in flashcards:
            self.db.refresh(flashcard)
        logger.info(f"User {user_id} added {len(flashcards)} cards to set {set_id}")
        return [FlashcardResponse.model_validate(card) for card in flashcards]

    def update_flashcard(self, user_id: str, flashcard_id: int, update: FlashcardUpdate) -> FlashcardResponse:
        flashcard, _ = self.access.get_flashcard_for(user_id, flashcard_id, AccessLevel.EDITOR)

        changes = update.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidInput("No fields to update")
        for field in ('term', 'description'):
            if field in changes and changes[field] is None:
                raise InvalidInput(f"{field.capitalize()} must not be empty")

        def apply():
            for field, value in changes.items():
                setattr(flashcard, field, value)
            return flashcard

        self._commit(apply, "update flashcard")
        self.db.refresh(flashcard)
        return FlashcardResponse.model_validate(flashcard)

    def delete_flashcard(self, user_id: str, flashcard_id: int) -> None:
        flashcard, _ = self.access.get_flashcard_for(user_id, flashcard_id, AccessLevel.EDITOR)

        def apply():
            self.db.delete(flashcard)

        self._commit(apply, "delete flashcard")
        logger.info(f"User {user_id} deleted flashcard {flashcard_id}")
