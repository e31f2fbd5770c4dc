from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime, UTC
from typing import List, Optional
import logging
import secrets

from models.sharing import ShareLink
from models.enums import AccessLevel
from services.access_control import AccessControlService
from database import commit_with_retry
from config.env import Settings
from api.errors import InternalError, LinkExpired, NotFound
from api.models.responses.flashcard import FlashcardResponse
from api.models.responses.sharing import ShareLinkResponse, SharedSetResponse

logger = logging.getLogger(__name__)

SHARE_LINK_NOT_FOUND = "Share link not found"

def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to naive UTC for storage; naive input is taken as UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)

def as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value

def generate_share_token() -> str:
    return secrets.token_hex(16)

class SharingService:
    """Share links that expose a set's content to anyone holding the token."""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.access = AccessControlService(db)

    def share_url(self, token: str) -> str:
        return f"{self.settings.frontend_url.rstrip('/')}/shared/{token}"

    def _to_response(self, link: ShareLink) -> ShareLinkResponse:
        return ShareLinkResponse(
            id=link.id,
            set_id=link.set_id,
            share_token=link.share_token,
            share_url=self.share_url(link.share_token),
            expires_at=link.expires_at,
            is_active=link.is_active,
            created_at=link.created_at
        )

    def create_link(self, user_id: str, set_id: int, expires_at: Optional[datetime] = None) -> ShareLinkResponse:
        """Create a share link; requires edit access to the set."""
        self.access.get_set_for(user_id, set_id, AccessLevel.EDITOR)

        link = ShareLink(
            set_id=set_id,
            created_by=user_id,
            share_token=generate_share_token(),
            expires_at=to_utc_naive(expires_at),
            is_active=True
        )

        def apply():
            self.db.add(link)
            return link

        try:
            commit_with_retry(self.db, apply)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create share link for set {set_id}: {str(e)}")
            raise InternalError("Failed to create share link")

        self.db.refresh(link)
        logger.info(f"User {user_id} created share link {link.id} for set {set_id}")
        return self._to_response(link)

    def list_links(self, user_id: str, set_id: int) -> List[ShareLinkResponse]:
        """All links of a set, newest first. Owner only."""
        self.access.require_true_owner(user_id, set_id)
        links = self.db.query(ShareLink).filter(
            ShareLink.set_id == set_id
        ).order_by(ShareLink.created_at.desc(), ShareLink.id.desc()).all()
        return [self._to_response(link) for link in links]

    def resolve_link(self, token: str, user_id: Optional[str] = None) -> SharedSetResponse:
        """Read a set through its share token.

        The token alone grants access, so the set's visibility is not checked.
        Signed-in owners and collaborators see their stronger access level.

        Raises:
            NotFound: If the token is unknown or the link was revoked
            LinkExpired: If the link is active but past its expiry
        """
        link = self.db.query(ShareLink).filter(ShareLink.share_token == token).first()
        if not link or not link.is_active:
            raise NotFound(SHARE_LINK_NOT_FOUND)
        if link.expires_at is not None and as_utc(link.expires_at) <= datetime.now(UTC):
            raise LinkExpired()

        flashcard_set = link.flashcard_set
        user_access = AccessLevel.PUBLIC
        if user_id:
            member_level = self.access.member_level(user_id, flashcard_set)
            if member_level != AccessLevel.NONE:
                user_access = member_level

        owner = flashcard_set.owner
        return SharedSetResponse(
            id=flashcard_set.id,
            title=flashcard_set.title,
            description=flashcard_set.description,
            tags=flashcard_set.tags or [],
            creator_username=owner.username if owner else None,
            creator_name=owner.full_name if owner else None,
            flashcards=[FlashcardResponse.model_validate(card) for card in flashcard_set.flashcards],
            user_access=user_access,
            is_shared=True,
            expires_at=link.expires_at
        )

    def revoke_link(self, user_id: str, set_id: int, token: str) -> None:
        """Deactivate a link. Owner only; revoking twice is not an error."""
        self.access.require_true_owner(user_id, set_id)

        link = self.db.query(ShareLink).filter(
            ShareLink.share_token == token,
            ShareLink.set_id == set_id
        ).first()
        if not link:
            raise NotFound(SHARE_LINK_NOT_FOUND)
        if not link.is_active:
            return

        def apply():
            link.is_active = False
            return link

        try:
            commit_with_retry(self.db, apply)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to revoke share link {link.id}: {str(e)}")
            raise InternalError("Failed to revoke share link")
        logger.info(f"User {user_id} revoked share link {link.id} for set {set_id}")
