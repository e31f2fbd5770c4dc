from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class FlashcardResponse(BaseModel):
    id: int
    set_id: int
    term: str
    description: str
    image_url: Optional[str] = None
    review_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
