"""
Request identity and role checks for FastAPI endpoints.
The session token travels either as a Bearer header or in the authToken cookie.
"""
import logging
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from feedback_hub.core.config import settings
from feedback_hub.core.exceptions import AuthenticationError
from feedback_hub.database import get_db
from feedback_hub.models.user import User, UserRole
from feedback_hub.services.jwt_service import JwtService

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_prefix}/auth/google", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Extracts and validates the current user from the session token.
    """
    token = token or request.cookies.get(settings.auth_cookie_name)
    if not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = JwtService().verify(token)
    except AuthenticationError as e:
        logger.info("Authentication failed", extra={"reason": e.message})
        raise _unauthorized(e.message)

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Authentication failed: Missing subject in token")
        raise _unauthorized("Missing subject in token")

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        logger.warning("Authentication failed: unknown or inactive user", extra={"user_id": user_id})
        raise _unauthorized("User not found or inactive")
    return user


def require_roles(*roles: UserRole) -> Callable:
    """
    Dependency factory that checks the user holds at least one of the given roles.

    Usage:
        @router.post("/cycles")
        def create_cycle(user: User = Depends(require_roles(UserRole.ADMIN, UserRole.HR))):
            ...
    """
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if not current_user.has_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {[r.value for r in roles]}",
            )
        return current_user
    return role_checker


def require_people_admin():
    """Shorthand for the roles that manage cycles and reporting lines."""
    return require_roles(UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.HR)
