from dataclasses import dataclass
from typing import Optional
import logging

import jwt

from api.errors import Unauthenticated
from config.env import Settings

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None

class IdentityProvider:
    """Verifies bearer credentials issued by the external identity provider."""

    def __init__(self, settings: Settings):
        self.secret = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm

    def verify(self, token: str) -> Identity:
        """Decode a bearer token into the caller's identity.

        Raises:
            Unauthenticated: If the token is malformed, expired, badly signed
                or carries no subject
        """
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Token expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected bearer token: {str(e)}")
            raise Unauthenticated("Invalid token")

        user_id = claims.get("sub") or claims.get("userId")
        if not user_id:
            raise Unauthenticated("Invalid token")
        return Identity(user_id=str(user_id), email=claims.get("email"))
