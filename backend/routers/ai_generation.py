from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
import logging

from database import get_db
from config.env import Settings, get_settings
from models.user import User
from routers.dependencies import get_completion_client, get_current_user
from services.ai_flashcard import AIFlashcardService
from utils.completion import CompletionClient
from api.models.requests.ai_generation import (
    FlashcardGenerationRequest,
    MultipleChoiceRequest,
    StudySuggestionsRequest,
    TextParseRequest
)
from api.models.responses.ai_generation import (
    FlashcardGenerationResponse,
    MultipleChoiceResponse,
    ParsedFlashcardsResponse,
    StudySuggestionsResponse
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Dependency injection for services
def get_ai_flashcard_service(
    db: Session = Depends(get_db),
    completion: Optional[CompletionClient] = Depends(get_completion_client),
    settings: Settings = Depends(get_settings)
) -> AIFlashcardService:
    return AIFlashcardService(db, completion, settings.completion)

@router.post("/parse", response_model=ParsedFlashcardsResponse)
async def parse_flashcards(
    request: TextParseRequest,
    user: User = Depends(get_current_user),
    service: AIFlashcardService = Depends(get_ai_flashcard_service)
):
    """Turn text into term/description pairs without saving them."""
    logger.info(f"User {user.id} parsing {len(request.text)} characters for {request.count} cards")
    return await service.generate_pairs(request.text, request.delimiter, request.count)

@router.post("/generate", response_model=FlashcardGenerationResponse)
async def generate_flashcards(
    request: FlashcardGenerationRequest,
    user: User = Depends(get_current_user),
    service: AIFlashcardService = Depends(get_ai_flashcard_service)
):
    """Turn text into cards and save them to a set."""
    logger.info(f"User {user.id} generating up to {request.count} cards for set {request.set_id}")
    return await service.generate_into_set(
        user.id,
        request.set_id,
        request.text,
        request.delimiter,
        request.count
    )

@router.post("/multiple-choice", response_model=MultipleChoiceResponse)
async def create_multiple_choice(
    request: MultipleChoiceRequest,
    user: User = Depends(get_current_user),
    service: AIFlashcardService = Depends(get_ai_flashcard_service)
):
    """Build a multiple-choice question from a card."""
    return await service.multiple_choice(user.id, request.flashcard_id, request.count)

@router.post("/suggestions", response_model=StudySuggestionsResponse)
async def get_study_suggestions(
    request: StudySuggestionsRequest,
    user: User = Depends(get_current_user),
    service: AIFlashcardService = Depends(get_ai_flashcard_service)
):
    """Suggest study strategies and the cards to practise first."""
    return await service.study_suggestions(user.id, request.set_id)
