from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from models.user import User
from routers.dependencies import get_current_user

from api.models.requests.study_session import StudySessionStart, StudySessionEnd, ProgressRecord
from api.models.responses.study_session import (
    StudySessionResponse,
    StudyProgressResponse,
    SessionSummaryResponse,
    SetStatisticsResponse,
    CardProgressResponse
)
from services.study_session import StudySessionService
from services.study_progress import StudyProgressService

router = APIRouter()

@router.post("/session/start", response_model=StudySessionResponse)
async def start_study_session(
    session_data: StudySessionStart,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Start a study session on a set."""
    service = StudySessionService(db)
    return service.start_session(user.id, session_data.set_id, session_data.mode)

@router.put("/session/{session_id}/end", response_model=StudySessionResponse)
async def end_study_session(
    session_id: int,
    outcome: StudySessionEnd,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record the outcome of a study session."""
    service = StudySessionService(db)
    return service.end_session(user.id, session_id, outcome)

@router.post("/progress", response_model=StudyProgressResponse)
async def record_progress(
    record: ProgressRecord,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record one attempt at a card."""
    service = StudyProgressService(db)
    return service.record_attempt(user.id, record.flashcard_id, record.is_correct, record.difficulty_rating)

@router.get("/stats/{set_id}", response_model=SetStatisticsResponse)
async def get_study_statistics(
    set_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = StudyProgressService(db)
    return service.set_statistics(user.id, set_id)

@router.get("/summary/{set_id}", response_model=SessionSummaryResponse)
async def get_session_summary(
    set_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = StudySessionService(db)
    return service.session_summary(user.id, set_id)

@router.get("/recommended/{set_id}", response_model=List[CardProgressResponse])
async def get_recommended_cards(
    set_id: int,
    limit: int = Query(default=10, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cards the caller should review next."""
    service = StudyProgressService(db)
    return service.recommend_for_review(user.id, set_id, limit)
