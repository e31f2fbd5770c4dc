from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime
from models.enums import AccessLevel
from api.models.responses.flashcard import FlashcardResponse

class CollaboratorResponse(BaseModel):
    id: int
    set_id: int
    user_id: str
    permission: str
    email: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class ShareLinkResponse(BaseModel):
    id: int
    set_id: int
    share_token: str
    share_url: str
    expires_at: Optional[datetime] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class SharedSetResponse(BaseModel):
    """A set read through a share token."""
    id: int = Field(..., description="Set ID")
    title: str
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    creator_username: Optional[str] = None
    creator_name: Optional[str] = None
    flashcards: List[FlashcardResponse] = Field(default_factory=list)
    user_access: AccessLevel = Field(..., description="public unless the requester owns or collaborates on the set")
    is_shared: bool = True
    expires_at: Optional[datetime] = None
