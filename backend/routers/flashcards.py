from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from models.user import User
from routers.dependencies import get_current_user, get_optional_user
from services.flashcard import FlashcardService
from api.models.requests.flashcard import FlashcardCreate, FlashcardBulkCreate, FlashcardUpdate
from api.models.responses.flashcard import FlashcardResponse
from api.models.responses.flashcard_set import DeleteResponse

router = APIRouter()

@router.get("/set/{set_id}", response_model=List[FlashcardResponse])
async def get_set_flashcards(
    set_id: int,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Get all cards of a set."""
    service = FlashcardService(db)
    return service.list_for_set(user.id if user else None, set_id)

@router.post("", response_model=FlashcardResponse, status_code=201)
async def create_flashcard(
    card: FlashcardCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a card to a set."""
    service = FlashcardService(db)
    return service.create_flashcard(user.id, card)

@router.post("/bulk", response_model=List[FlashcardResponse], status_code=201)
async def bulk_create_flashcards(
    request: FlashcardBulkCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add several cards to a set at once."""
    service = FlashcardService(db)
    return service.bulk_create(user.id, request.set_id, request.flashcards)

@router.put("/{flashcard_id}", response_model=FlashcardResponse)
async def update_flashcard(
    flashcard_id: int,
    update: FlashcardUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a card's content."""
    service = FlashcardService(db)
    return service.update_flashcard(user.id, flashcard_id, update)

@router.delete("/{flashcard_id}", response_model=DeleteResponse)
async def delete_flashcard(
    flashcard_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a card."""
    service = FlashcardService(db)
    service.delete_flashcard(user.id, flashcard_id)
    return DeleteResponse(message="Flashcard deleted successfully")
