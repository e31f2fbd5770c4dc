from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from models.enums import AccessLevel
from api.models.responses.flashcard import FlashcardResponse
from api.models.responses.sharing import CollaboratorResponse

class FlashcardSetResponse(BaseModel):
    id: int = Field(..., description="Set ID")
    owner_id: str = Field(..., description="ID of the owning user")
    title: str = Field(..., description="Title of the set")
    description: Optional[str] = Field(default=None, description="Description of the set")
    tags: List[str] = Field(default_factory=list, description="Tags of the set")
    is_public: bool = Field(default=False, description="Whether anyone may view the set")
    is_collaborative: bool = Field(default=False, description="Whether the set accepts collaborators")
    card_count: int = Field(default=0, description="Total number of cards in the set")
    is_favorited: bool = Field(default=False, description="Whether the caller favorited the set")
    creator_username: Optional[str] = Field(default=None, description="Username of the owner")
    access_level: AccessLevel = Field(default=AccessLevel.VIEWER, description="Caller's effective access")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class FlashcardSetDetailResponse(FlashcardSetResponse):
    flashcards: List[FlashcardResponse] = Field(default_factory=list, description="List of flashcards in the set")
    collaborators: List[CollaboratorResponse] = Field(default_factory=list, description="Collaborators, only listed for the owner")

class FavoriteToggleResponse(BaseModel):
    set_id: int
    favorited: bool

class DeleteResponse(BaseModel):
    status: str = "success"
    message: str
