from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from models.user import User
from routers.dependencies import get_current_user
from services.collaborator import CollaboratorService
from api.models.requests.sharing import CollaboratorCreate, CollaboratorUpdate
from api.models.responses.sharing import CollaboratorResponse
from api.models.responses.flashcard_set import DeleteResponse

router = APIRouter()

@router.get("/{set_id}/collaborators", response_model=List[CollaboratorResponse])
async def get_collaborators(
    set_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CollaboratorService(db)
    return service.list_collaborators(user.id, set_id)

@router.post("/{set_id}/collaborators", response_model=CollaboratorResponse)
async def add_collaborator(
    set_id: int,
    request: CollaboratorCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Invite a user by email, or change the level of an existing grant."""
    service = CollaboratorService(db)
    return service.add_collaborator(user.id, set_id, request.user_email, request.permission)

@router.put("/{set_id}/collaborators/{collaborator_id}", response_model=CollaboratorResponse)
async def update_collaborator(
    set_id: int,
    collaborator_id: int,
    request: CollaboratorUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CollaboratorService(db)
    return service.update_permission(user.id, set_id, collaborator_id, request.permission)

@router.delete("/{set_id}/collaborators/{collaborator_id}", response_model=DeleteResponse)
async def remove_collaborator(
    set_id: int,
    collaborator_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CollaboratorService(db)
    service.remove_collaborator(user.id, set_id, collaborator_id)
    return DeleteResponse(message="Collaborator removed successfully")
