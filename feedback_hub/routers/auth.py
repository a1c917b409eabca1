import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from feedback_hub.core.config import settings
from feedback_hub.database import get_db
from feedback_hub.models.user import User
from feedback_hub.routers.auth_deps import get_current_user
from feedback_hub.schemas.auth import GoogleLoginRequest, LoginResponse, MockLoginRequest, UserResponse
from feedback_hub.services.google_oauth import GoogleOAuthService
from feedback_hub.services.jwt_service import JwtService
from feedback_hub.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def _session_response(response: Response, user: User) -> LoginResponse:
    token = JwtService().issue_for_user(user)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        secure=not settings.is_development,
        samesite="lax",
        max_age=settings.jwt_expire_days * 24 * 3600,
    )
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/google", response_model=LoginResponse)
def login_with_google(body: GoogleLoginRequest, response: Response, db: Session = Depends(get_db)):
    payload = GoogleOAuthService().verify_id_token(body.id_token)

    email = payload.get("email")
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email not found in token")

    user = UserService(db).upsert_google_user(
        email=email,
        name=payload.get("name"),
        picture=payload.get("picture"),
        google_id=payload.get("sub"),
    )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is inactive")
    return _session_response(response, user)


@router.post("/mock-login", response_model=LoginResponse)
def mock_login(body: MockLoginRequest, response: Response, db: Session = Depends(get_db)):
    # Local development and test runs only
    if not settings.is_development:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    user = UserService(db).upsert_mock_user(body.email, body.name, body.roles)
    logger.info("Mock login", extra={"user_id": user.id})
    return _session_response(response, user)


@router.get("/me", response_model=UserResponse)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(settings.auth_cookie_name)
    return {"success": True}
