from datetime import timedelta
from typing import Any, Dict, Optional

import jwt

from feedback_hub.core.config import settings
from feedback_hub.core.exceptions import AuthenticationError
from feedback_hub.database import utcnow
from feedback_hub.models.user import User


class JwtService:
    """Signs and verifies the session tokens handed out after login."""

    def __init__(self, secret: Optional[str] = None, algorithm: Optional[str] = None):
        self.secret = secret or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm

    def sign(self, payload: Dict[str, Any], expires_in: Optional[timedelta] = None) -> str:
        now = utcnow()
        claims = dict(payload)
        claims["iat"] = int(now.timestamp())
        claims["exp"] = int((now + (expires_in or timedelta(days=settings.jwt_expire_days))).timestamp())
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Invalid token") from e

    def issue_for_user(self, user: User, expires_in: Optional[timedelta] = None) -> str:
        return self.sign(
            {
                "sub": user.id,
                "email": user.email,
                "roles": list(user.roles or []),
                "org_id": user.organization_id,
            },
            expires_in,
        )
