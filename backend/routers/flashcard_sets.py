from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from models.user import User
from routers.dependencies import get_current_user, get_optional_user
from services.flashcard_set import FlashcardSetService
from api.models.requests.flashcard_set import FlashcardSetCreate, FlashcardSetUpdate
from api.models.responses.flashcard_set import (
    FlashcardSetResponse,
    FlashcardSetDetailResponse,
    FavoriteToggleResponse,
    DeleteResponse
)

router = APIRouter()

@router.get("", response_model=List[FlashcardSetResponse])
async def get_flashcard_sets(
    search: Optional[str] = Query(default=None, description="Match against title and description"),
    tags: Optional[str] = Query(default=None, description="Comma-separated tags"),
    public_only: bool = Query(default=False),
    user_id: Optional[str] = Query(default=None, description="Only sets owned by this user"),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """List the sets visible to the caller."""
    tag_list = [tag.strip() for tag in tags.split(",") if tag.strip()] if tags else None
    service = FlashcardSetService(db)
    return service.list_sets(
        user_id=user.id if user else None,
        search=search,
        tags=tag_list,
        public_only=public_only,
        owner_id=user_id,
        limit=limit,
        offset=offset
    )

@router.get("/user/favorites", response_model=List[FlashcardSetResponse])
async def get_favorite_sets(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the caller's favorite sets."""
    service = FlashcardSetService(db)
    return service.list_favorites(user.id)

@router.get("/{set_id}", response_model=FlashcardSetDetailResponse)
async def get_flashcard_set(
    set_id: int,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Get a specific flashcard set with all its cards."""
    service = FlashcardSetService(db)
    return service.get_set(user.id if user else None, set_id)

@router.post("", response_model=FlashcardSetResponse, status_code=201)
async def create_flashcard_set(
    flashcard_set: FlashcardSetCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new flashcard set with optional initial cards."""
    service = FlashcardSetService(db)
    return service.create_set(user.id, flashcard_set)

@router.put("/{set_id}", response_model=FlashcardSetResponse)
async def update_flashcard_set(
    set_id: int,
    set_update: FlashcardSetUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a flashcard set's metadata."""
    service = FlashcardSetService(db)
    return service.update_set(user.id, set_id, set_update)

@router.delete("/{set_id}", response_model=DeleteResponse)
async def delete_flashcard_set(
    set_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a set and all of its cards."""
    service = FlashcardSetService(db)
    service.delete_set(user.id, set_id)
    return DeleteResponse(message="Set deleted successfully")

@router.post("/{set_id}/favorite", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    set_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Favorite or unfavorite a set."""
    service = FlashcardSetService(db)
    return service.toggle_favorite(user.id, set_id)
