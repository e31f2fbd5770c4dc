from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from api.models.requests.flashcard_set import FlashcardContent

class FlashcardCreate(FlashcardContent):
    set_id: int = Field(..., gt=0, description="ID of the set receiving the card")
    review_notes: Optional[str] = Field(default=None, description="Optional review notes")

class FlashcardBulkCreate(BaseModel):
    set_id: int = Field(..., gt=0, description="ID of the set receiving the cards")
    flashcards: List[FlashcardContent] = Field(..., min_length=1, description="Cards to create")

class FlashcardUpdate(BaseModel):
    term: Optional[str] = Field(default=None, description="New term")
    description: Optional[str] = Field(default=None, description="New description")
    image_url: Optional[str] = Field(default=None, description="New image reference")
    review_notes: Optional[str] = Field(default=None, description="New review notes")

    @field_validator('term', 'description')
    @classmethod
    def strip_text(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError('must not be blank')
        return v
