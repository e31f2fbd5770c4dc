from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class ProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class UserStatsResponse(BaseModel):
    total_sets: int = 0
    total_flashcards: int = 0
    total_sessions: int = 0
    total_time_minutes: int = 0
    accuracy_percentage: int = 0

class UploadResponse(BaseModel):
    url: str
    key: str
    filename: str
    content_type: str
