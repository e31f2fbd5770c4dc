from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from models.enums import StudyMode, DifficultyRating

class StudySessionResponse(BaseModel):
    id: int = Field(..., description="Session ID")
    set_id: int = Field(..., description="ID of the flashcard set being studied")
    mode: StudyMode = Field(..., description="Study mode")
    cards_studied: int = Field(default=0, description="Number of cards studied")
    correct_answers: int = Field(default=0, description="Number of correct answers")
    total_time_seconds: int = Field(default=0, description="Elapsed time in seconds")
    started_at: datetime = Field(..., description="When the session started")
    completed_at: Optional[datetime] = Field(default=None, description="When the session was completed")

    model_config = ConfigDict(from_attributes=True)

class StudyProgressResponse(BaseModel):
    flashcard_id: int
    correct_count: int
    incorrect_count: int
    difficulty_rating: DifficultyRating
    last_studied: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class SessionSummaryResponse(BaseModel):
    set_id: int
    total_sessions: int = 0
    total_cards_studied: int = 0
    total_correct: int = 0
    total_time_seconds: int = 0
    accuracy: float = Field(default=0.0, description="total_correct / total_cards_studied, 0 when nothing was studied")

class CardProgressResponse(BaseModel):
    id: int
    term: str
    description: str
    correct_count: Optional[int] = None
    incorrect_count: Optional[int] = None
    difficulty_rating: Optional[DifficultyRating] = None
    last_studied: Optional[datetime] = None

class SetStatisticsResponse(SessionSummaryResponse):
    total_time_minutes: int = 0
    avg_accuracy: int = Field(default=0, description="Accuracy as a rounded percentage")
    card_progress: List[CardProgressResponse] = Field(default_factory=list)
    recent_sessions: List[StudySessionResponse] = Field(default_factory=list)
