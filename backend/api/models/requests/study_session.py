from pydantic import BaseModel, Field, model_validator
from typing import Optional
from models.enums import StudyMode, DifficultyRating

class StudySessionStart(BaseModel):
    set_id: int = Field(..., gt=0, description="ID of the flashcard set to study")
    mode: StudyMode = Field(..., description="Study mode")

class StudySessionEnd(BaseModel):
    cards_studied: int = Field(default=0, ge=0, description="Number of cards studied")
    correct_answers: int = Field(default=0, ge=0, description="Number of correct answers")
    total_time_seconds: int = Field(default=0, ge=0, description="Elapsed time in seconds")

    @model_validator(mode='after')
    def validate_counts(self):
        if self.correct_answers > self.cards_studied:
            raise ValueError('correct_answers cannot exceed cards_studied')
        return self

class ProgressRecord(BaseModel):
    flashcard_id: int = Field(..., gt=0, description="ID of the flashcard attempted")
    is_correct: bool = Field(..., description="Whether the attempt was correct")
    difficulty_rating: Optional[DifficultyRating] = Field(default=None, description="Optional self-assessed difficulty")
