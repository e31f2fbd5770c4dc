from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from models.enums import PermissionLevel

class CollaboratorCreate(BaseModel):
    user_email: str = Field(..., min_length=3, description="Email of the user to invite")
    permission: PermissionLevel = Field(default=PermissionLevel.VIEWER, description="Permission level to grant")

    @field_validator('user_email')
    @classmethod
    def normalize_email(cls, v):
        v = v.strip().lower()
        if '@' not in v:
            raise ValueError('Invalid email')
        return v

    @field_validator('permission', mode='before')
    @classmethod
    def parse_permission(cls, v):
        try:
            return PermissionLevel.parse(v)
        except ValueError:
            raise ValueError('Invalid permission level')

class CollaboratorUpdate(BaseModel):
    permission: PermissionLevel = Field(..., description="New permission level")

    @field_validator('permission', mode='before')
    @classmethod
    def parse_permission(cls, v):
        try:
            return PermissionLevel.parse(v)
        except ValueError:
            raise ValueError('Invalid permission level')

class ShareLinkCreate(BaseModel):
    expires_at: Optional[datetime] = Field(default=None, description="Optional expiry; naive values are read as UTC")
