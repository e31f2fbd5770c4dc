from pydantic import BaseModel, Field, field_validator
from typing import Optional

class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(default=None, max_length=100, description="Unique username")
    full_name: Optional[str] = Field(default=None, max_length=255, description="Display name")
    avatar_url: Optional[str] = Field(default=None, description="Avatar image URL")

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError('Username must not be blank')
        return v
