from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from config.env import Settings, get_settings
from models.user import User
from routers.dependencies import get_current_user, get_optional_user
from services.sharing import SharingService
from api.models.requests.sharing import ShareLinkCreate
from api.models.responses.sharing import ShareLinkResponse, SharedSetResponse
from api.models.responses.flashcard_set import DeleteResponse

# Mounted under /api/sets
router = APIRouter()

# Mounted under /api/shared
public_router = APIRouter()

def get_sharing_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> SharingService:
    return SharingService(db, settings)

@router.post("/{set_id}/share", response_model=ShareLinkResponse)
async def create_share_link(
    set_id: int,
    request: Optional[ShareLinkCreate] = Body(default=None),
    user: User = Depends(get_current_user),
    service: SharingService = Depends(get_sharing_service)
):
    """Create a link that lets anyone holding it read the set."""
    expires_at = request.expires_at if request else None
    return service.create_link(user.id, set_id, expires_at)

@router.get("/{set_id}/share", response_model=List[ShareLinkResponse])
async def get_share_links(
    set_id: int,
    user: User = Depends(get_current_user),
    service: SharingService = Depends(get_sharing_service)
):
    return service.list_links(user.id, set_id)

@router.delete("/{set_id}/share/{token}", response_model=DeleteResponse)
async def revoke_share_link(
    set_id: int,
    token: str,
    user: User = Depends(get_current_user),
    service: SharingService = Depends(get_sharing_service)
):
    service.revoke_link(user.id, set_id, token)
    return DeleteResponse(message="Share link revoked successfully")

@public_router.get("/{token}", response_model=SharedSetResponse)
async def get_shared_set(
    token: str,
    user: Optional[User] = Depends(get_optional_user),
    service: SharingService = Depends(get_sharing_service)
):
    """Read a set through a share token."""
    return service.resolve_link(token, user.id if user else None)
