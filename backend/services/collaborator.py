from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List
import logging

from models.user import User
from models.sharing import Collaborator
from models.enums import AccessLevel, PermissionLevel
from services.access_control import AccessControlService
from database import commit_with_retry
from api.errors import Forbidden, InternalError, InvalidInput, NotFound
from api.models.responses.sharing import CollaboratorResponse

logger = logging.getLogger(__name__)

COLLABORATOR_NOT_FOUND = "Collaborator not found"

def _to_response(grant: Collaborator) -> CollaboratorResponse:
    user = grant.user
    return CollaboratorResponse(
        id=grant.id,
        set_id=grant.set_id,
        user_id=grant.user_id,
        permission=grant.permission_level.value,
        email=user.email if user else None,
        username=user.username if user else None,
        full_name=user.full_name if user else None,
        created_at=grant.created_at
    )

class CollaboratorService:
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

    def _get_grant(self, set_id: int, collaborator_id: int) -> Collaborator:
        grant = self.db.query(Collaborator).filter(
            Collaborator.id == collaborator_id,
            Collaborator.set_id == set_id
        ).first()
        if not grant:
            raise NotFound(COLLABORATOR_NOT_FOUND)
        return grant

    def add_collaborator(
        self,
        user_id: str,
        set_id: int,
        email: str,
        permission: PermissionLevel = PermissionLevel.VIEWER
    ) -> CollaboratorResponse:
        """Grant a user access to a set, or change the level of an existing grant."""
        flashcard_set = self.access.require_true_owner(user_id, set_id)

        invitee = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if not invitee:
            raise NotFound("User not found")
        if invitee.id == flashcard_set.owner_id:
            raise InvalidInput("The set owner cannot be added as a collaborator")

        grant = self.access.grant_for(invitee.id, set_id)
        if grant is None:
            grant = Collaborator(set_id=set_id, user_id=invitee.id)

        def apply():
            grant.permission = permission.value
            self.db.add(grant)
            return grant

        self._commit(apply, "add collaborator")
        self.db.refresh(grant)
        logger.info(f"User {user_id} granted {permission.value} on set {set_id} to {invitee.id}")
        return _to_response(grant)

    def list_collaborators(self, user_id: str, set_id: int) -> List[CollaboratorResponse]:
        """Grants on a set, oldest first; visible to the owner and collaborators."""
        flashcard_set, _ = self.access.get_set_for(user_id, set_id, AccessLevel.VIEWER)
        if self.access.member_level(user_id, flashcard_set) == AccessLevel.NONE:
            raise Forbidden("Only the owner and collaborators can list collaborators")

        grants = self.db.query(Collaborator).filter(
            Collaborator.set_id == set_id
        ).order_by(Collaborator.created_at.asc(), Collaborator.id.asc()).all()
        return [_to_response(grant) for grant in grants]

    def update_permission(
        self,
        user_id: str,
        set_id: int,
        collaborator_id: int,
        permission: PermissionLevel
    ) -> CollaboratorResponse:
        self.access.require_true_owner(user_id, set_id)
        grant = self._get_grant(set_id, collaborator_id)

        def apply():
            grant.permission = permission.value
            return grant

        self._commit(apply, "update permission")
        self.db.refresh(grant)
        return _to_response(grant)

    def remove_collaborator(self, user_id: str, set_id: int, collaborator_id: int) -> None:
        self.access.require_true_owner(user_id, set_id)
        grant = self._get_grant(set_id, collaborator_id)

        def apply():
            self.db.delete(grant)

        self._commit(apply, "remove collaborator")
        logger.info(f"User {user_id} removed collaborator {collaborator_id} from set {set_id}")
