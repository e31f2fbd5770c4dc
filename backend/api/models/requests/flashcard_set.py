from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

class FlashcardContent(BaseModel):
    term: str = Field(..., min_length=1, description="Term shown on the front of the card")
    description: str = Field(..., min_length=1, description="Description shown on the back of the card")
    image_url: Optional[str] = Field(default=None, description="Optional image reference")

    @field_validator('term', 'description')
    @classmethod
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v

class FlashcardSetCreate(BaseModel):
    title: str = Field(..., description="Title of the flashcard set")
    description: Optional[str] = Field(default=None, description="Optional description of the set")
    tags: List[str] = Field(default_factory=list, description="Tags used for search")
    is_public: bool = Field(default=False, description="Whether anyone may view the set")
    is_collaborative: bool = Field(default=False, description="Whether the owner invites collaborators")
    flashcards: Optional[List[FlashcardContent]] = Field(default=None, description="Optional list of initial flashcards")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Title is required')
        return v

    @field_validator('description')
    @classmethod
    def strip_description(cls, v):
        if v is not None:
            v = v.strip() or None
        return v

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, v):
        return normalize_tags(v)

class FlashcardSetUpdate(BaseModel):
    title: Optional[str] = Field(default=None, description="New title for the set")
    description: Optional[str] = Field(default=None, description="New description for the set")
    tags: Optional[List[str]] = Field(default=None, description="Replacement tag list")
    is_public: Optional[bool] = Field(default=None, description="New visibility")
    is_collaborative: Optional[bool] = Field(default=None, description="New collaboration flag")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError('Title must not be blank')
        return v

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, v):
        return normalize_tags(v) if v is not None else None

def normalize_tags(tags: List[str]) -> List[str]:
    """Trim, drop blanks and de-duplicate tags while keeping first-seen order."""
    seen = []
    for tag in tags or []:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
