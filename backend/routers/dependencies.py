from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from typing import Optional
import logging

from database import get_db
from config.env import Settings, get_settings
from models.user import User
from services.identity import IdentityProvider
from services.user import UserService
from utils.completion import CompletionClient
from utils.s3 import S3BlobStore
from api.errors import Unauthenticated

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

def get_identity_provider(settings: Settings = Depends(get_settings)) -> IdentityProvider:
    return IdentityProvider(settings)

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
) -> User:
    """Require a valid bearer credential and return the caller's profile."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    identity = identity_provider.verify(credentials.credentials)
    return UserService(db).get_or_create_profile(identity)

def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Return the caller's profile, or None for anonymous callers and unusable credentials."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        identity = identity_provider.verify(credentials.credentials)
    except Unauthenticated as e:
        logger.debug(f"Ignoring bearer credential on optional route: {e.detail}")
        return None
    return UserService(db).get_or_create_profile(identity)

def get_completion_client(request: Request) -> Optional[CompletionClient]:
    return getattr(request.app.state, "completion_client", None)

def get_blob_store(request: Request) -> S3BlobStore:
    return request.app.state.blob_store
