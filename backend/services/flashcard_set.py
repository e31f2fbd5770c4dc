from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
import json
import logging

from models.set import FlashcardSet
from models.flashcard import Flashcard
from models.sharing import Favorite
from models.enums import AccessLevel
from services.access_control import AccessControlService
from services.collaborator import CollaboratorService
from database import commit_with_retry
from api.errors import Conflict, InternalError, InvalidInput
from api.models.requests.flashcard_set import FlashcardSetCreate, FlashcardSetUpdate
from api.models.responses.flashcard import FlashcardResponse
from api.models.responses.flashcard_set import (
    FlashcardSetResponse,
    FlashcardSetDetailResponse,
    FavoriteToggleResponse
)

logger = logging.getLogger(__name__)

class FlashcardSetService:
    def __init__(self, db: Session):
        self.db = db
        self.access = AccessControlService(db)

    def _card_counts(self, set_ids: List[int]) -> Dict[int, int]:
        if not set_ids:
            return {}
        rows = self.db.query(Flashcard.set_id, func.count(Flashcard.id)).filter(
            Flashcard.set_id.in_(set_ids)
        ).group_by(Flashcard.set_id).all()
        return dict(rows)

    def _favorited_ids(self, user_id: Optional[str], set_ids: List[int]) -> set:
        if not user_id or not set_ids:
            return set()
        rows = self.db.query(Favorite.set_id).filter(
            Favorite.user_id == user_id,
            Favorite.set_id.in_(set_ids)
        ).all()
        return {set_id for (set_id,) in rows}

    def _to_response(
        self,
        flashcard_set: FlashcardSet,
        user_id: Optional[str],
        card_count: int,
        is_favorited: bool,
        access_level: Optional[AccessLevel] = None
    ) -> FlashcardSetResponse:
        owner = flashcard_set.owner
        return FlashcardSetResponse(
            id=flashcard_set.id,
            owner_id=flashcard_set.owner_id,
            title=flashcard_set.title,
            description=flashcard_set.description,
            tags=flashcard_set.tags or [],
            is_public=flashcard_set.is_public,
            is_collaborative=flashcard_set.is_collaborative,
            card_count=card_count,
            is_favorited=is_favorited,
            creator_username=owner.username if owner else None,
            access_level=access_level or self.access.resolve_access(user_id, flashcard_set),
            created_at=flashcard_set.created_at,
            updated_at=flashcard_set.updated_at
        )

    def _responses(self, sets: List[FlashcardSet], user_id: Optional[str]) -> List[FlashcardSetResponse]:
        set_ids = [s.id for s in sets]
        counts = self._card_counts(set_ids)
        favorited = self._favorited_ids(user_id, set_ids)
        return [
            self._to_response(s, user_id, counts.get(s.id, 0), s.id in favorited)
            for s in sets
        ]

    def _commit(self, apply, action: str):
        try:
            return commit_with_retry(self.db, apply)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {str(e)}")
            raise InternalError(f"Failed to {action}")

    def list_sets(
        self,
        user_id: Optional[str] = None,
        search: Optional[str] = None,
        tags: Optional[List[str]] = None,
        public_only: bool = False,
        owner_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List[FlashcardSetResponse]:
        """List the sets a caller can see, most recently updated first.

        Args:
            user_id: Caller, or None for anonymous callers (public sets only)
            search: Substring matched against title and description
            tags: Sets carrying any of these tags
            public_only: Restrict to public sets
            owner_id: Restrict to sets owned by this user
            limit: Page size
            offset: Page start
        """
        query = self.db.query(FlashcardSet).filter(self.access.visible_sets_filter(user_id))

        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                FlashcardSet.title.ilike(pattern),
                FlashcardSet.description.ilike(pattern)
            ))
        if tags:
            tags_text = cast(FlashcardSet.tags, String)
            query = query.filter(or_(*[
                tags_text.contains(json.dumps(tag), autoescape=True) for tag in tags
            ]))
        if public_only:
            query = query.filter(FlashcardSet.is_public.is_(True))
        if owner_id:
            query = query.filter(FlashcardSet.owner_id == owner_id)

        sets = query.order_by(
            FlashcardSet.updated_at.desc(),
            FlashcardSet.id.desc()
        ).offset(offset).limit(limit).all()
        return self._responses(sets, user_id)

    def get_set(self, user_id: Optional[str], set_id: int) -> FlashcardSetDetailResponse:
        """Get a set with its cards; the owner also sees the collaborator list."""
        flashcard_set, level = self.access.get_set_for(user_id, set_id, AccessLevel.VIEWER)

        collaborators = []
        if user_id and flashcard_set.owner_id == user_id:
            collaborators = CollaboratorService(self.db).list_collaborators(user_id, set_id)

        summary = self._to_response(
            flashcard_set,
            user_id,
            card_count=len(flashcard_set.flashcards),
            is_favorited=bool(self._favorited_ids(user_id, [set_id])),
            access_level=level
        )
        return FlashcardSetDetailResponse(
            **summary.model_dump(),
            flashcards=[FlashcardResponse.model_validate(card) for card in flashcard_set.flashcards],
            collaborators=collaborators
        )

    def create_set(self, user_id: str, set_data: FlashcardSetCreate) -> FlashcardSetResponse:
        """Create a set owned by the caller, with optional initial cards."""
        flashcard_set = FlashcardSet(
            owner_id=user_id,
            title=set_data.title,
            description=set_data.description,
            tags=set_data.tags,
            is_public=set_data.is_public,
            is_collaborative=set_data.is_collaborative
        )
        for card in set_data.flashcards or []:
            flashcard_set.flashcards.append(Flashcard(
                term=card.term,
                description=card.description,
                image_url=card.image_url
            ))

        def apply():
            self.db.add(flashcard_set)
            return flashcard_set

        self._commit(apply, "create set")
        self.db.refresh(flashcard_set)
        logger.info(f"User {user_id} created set {flashcard_set.id} with {len(flashcard_set.flashcards)} cards")
        return self._to_response(
            flashcard_set,
            user_id,
            card_count=len(flashcard_set.flashcards),
            is_favorited=False,
            access_level=AccessLevel.OWNER
        )

    def update_set(self, user_id: str, set_id: int, set_update: FlashcardSetUpdate) -> FlashcardSetResponse:
        """Update a set's metadata; requires edit access."""
        flashcard_set, level = self.access.get_set_for(user_id, set_id, AccessLevel.EDITOR)

        changes = set_update.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidInput("No fields to update")
        if 'title' in changes and changes['title'] is None:
            raise InvalidInput("Title is required")

        def apply():
            for field, value in changes.items():
                if field == 'tags' and value is None:
                    value = []
                if field in ('is_public', 'is_collaborative') and value is None:
                    continue
                setattr(flashcard_set, field, value)
            return flashcard_set

        self._commit(apply, "update set")
        self.db.refresh(flashcard_set)
        return self._to_response(
            flashcard_set,
            user_id,
            card_count=len(flashcard_set.flashcards),
            is_favorited=bool(self._favorited_ids(user_id, [set_id])),
            access_level=level
        )

    def delete_set(self, user_id: str, set_id: int) -> None:
        """Delete a set and everything hanging off it. Owner only."""
        flashcard_set = self.access.require_true_owner(user_id, set_id)

        def apply():
            self.db.delete(flashcard_set)

        self._commit(apply, "delete set")
        logger.info(f"User {user_id} deleted set {set_id}")

    def toggle_favorite(self, user_id: str, set_id: int) -> FavoriteToggleResponse:
        """Favorite a visible set, or unfavorite it if it already is."""
        self.access.get_set_for(user_id, set_id, AccessLevel.VIEWER)

        existing = self.db.query(Favorite).filter(
            Favorite.user_id == user_id,
            Favorite.set_id == set_id
        ).first()
        if existing:
            self._commit(lambda: self.db.delete(existing), "remove favorite")
            return FavoriteToggleResponse(set_id=set_id, favorited=False)

        self.add_favorite(user_id, set_id)
        return FavoriteToggleResponse(set_id=set_id, favorited=True)

    def add_favorite(self, user_id: str, set_id: int) -> Favorite:
        """Favorite a visible set.

        Raises:
            Conflict: If the set is already a favorite
        """
        self.access.get_set_for(user_id, set_id, AccessLevel.VIEWER)
        favorite = Favorite(user_id=user_id, set_id=set_id)

        def apply():
            self.db.add(favorite)
            self.db.flush()
            return favorite

        try:
            commit_with_retry(self.db, apply)
        except IntegrityError:
            self.db.rollback()
            raise Conflict("Set is already a favorite")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to add favorite: {str(e)}")
            raise InternalError("Failed to add favorite")
        return favorite

    def list_favorites(self, user_id: str) -> List[FlashcardSetResponse]:
        """The caller's favorites that are still visible to them, newest favorite first."""
        sets = self.db.query(FlashcardSet).join(
            Favorite, Favorite.set_id == FlashcardSet.id
        ).filter(
            Favorite.user_id == user_id,
            self.access.visible_sets_filter(user_id)
        ).order_by(Favorite.created_at.desc(), Favorite.id.desc()).all()
        return self._responses(sets, user_id)
