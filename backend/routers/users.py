from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from database import get_db
from models.user import User
from routers.dependencies import get_current_user
from services.user import UserService
from api.models.requests.user import ProfileUpdate
from api.models.responses.user import ProfileResponse, UserStatsResponse
from api.models.responses.flashcard_set import DeleteResponse

router = APIRouter()

@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = UserService(db)
    return service.get_profile(user.id)

@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    update: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = UserService(db)
    return service.update_profile(user.id, update)

@router.get("/stats", response_model=UserStatsResponse)
async def get_user_stats(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Totals across the caller's sets and study sessions."""
    service = UserService(db)
    return service.get_stats(user.id)

@router.delete("/account", response_model=DeleteResponse)
async def delete_account(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete the caller's profile and everything they own."""
    service = UserService(db)
    service.delete_account(user.id)
    return DeleteResponse(message="Account deleted successfully")
