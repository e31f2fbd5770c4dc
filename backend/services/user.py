from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from models.user import User
from models.set import FlashcardSet
from models.flashcard import Flashcard
from models.study import StudySession
from services.identity import Identity
from services.study_session import round_half_up
from api.errors import Conflict, InternalError, InvalidInput, NotFound
from api.models.requests.user import ProfileUpdate
from api.models.responses.user import ProfileResponse, UserStatsResponse

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_or_create_profile(self, identity: Identity) -> User:
        """Return the profile row for an identity, creating it on first sight."""
        user = self.db.get(User, identity.user_id)
        if user:
            return user

        user = User(id=identity.user_id, email=identity.email.lower() if identity.email else None)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Either a concurrent request created the row first or the email is taken
            self.db.rollback()
            user = self.db.get(User, identity.user_id)
            if user is None:
                raise Conflict("Email is already registered to another account")
            return user
        self.db.refresh(user)
        logger.info(f"Created profile for user {identity.user_id}")
        return user

    def get_profile(self, user_id: str) -> ProfileResponse:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFound("User not found")
        return ProfileResponse.model_validate(user)

    def update_profile(self, user_id: str, update: ProfileUpdate) -> ProfileResponse:
        """Update profile fields; a username already used by someone else is a conflict."""
        user = self.db.get(User, user_id)
        if not user:
            raise NotFound("User not found")

        changes = update.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidInput("No fields to update")

        username = changes.get('username')
        if username:
            taken = self.db.query(User.id).filter(
                User.username == username,
                User.id != user_id
            ).first()
            if taken:
                raise Conflict("Username already taken")

        for field, value in changes.items():
            setattr(user, field, value)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("Username already taken")
        self.db.refresh(user)
        return ProfileResponse.model_validate(user)

    def get_stats(self, user_id: str) -> UserStatsResponse:
        """Totals across everything the user owns and studied."""
        total_sets = self.db.query(func.count(FlashcardSet.id)).filter(
            FlashcardSet.owner_id == user_id
        ).scalar() or 0

        total_flashcards = self.db.query(func.count(Flashcard.id)).join(
            FlashcardSet, Flashcard.set_id == FlashcardSet.id
        ).filter(FlashcardSet.owner_id == user_id).scalar() or 0

        total_sessions, total_time, total_correct, total_studied = self.db.query(
            func.count(StudySession.id),
            func.coalesce(func.sum(StudySession.total_time_seconds), 0),
            func.coalesce(func.sum(StudySession.correct_answers), 0),
            func.coalesce(func.sum(StudySession.cards_studied), 0)
        ).filter(StudySession.user_id == user_id).one()

        return UserStatsResponse(
            total_sets=total_sets,
            total_flashcards=total_flashcards,
            total_sessions=total_sessions,
            total_time_minutes=round_half_up(total_time / 60),
            accuracy_percentage=round_half_up(total_correct / total_studied * 100) if total_studied else 0
        )

    def delete_account(self, user_id: str) -> None:
        """Delete the profile and everything it owns."""
        user = self.db.get(User, user_id)
        if not user:
            raise NotFound("User not found")
        try:
            self.db.delete(user)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete account {user_id}: {str(e)}")
            raise InternalError("Failed to delete account")
        logger.info(f"Deleted account {user_id}")
