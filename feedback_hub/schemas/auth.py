from pydantic import ConfigDict, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from feedback_hub.core.schemas import CamelModel


class GoogleLoginRequest(CamelModel):
    id_token: str = Field(..., min_length=1)


class MockLoginRequest(CamelModel):
    email: EmailStr
    name: Optional[str] = None
    roles: Optional[List[str]] = None


class UserResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None
    roles: List[str]
    organization_id: Optional[str] = None
    is_active: bool
    is_super_admin: bool
    created_at: datetime


class LoginResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse


class TokenPayload(CamelModel):
    sub: str
    email: Optional[str] = None
    roles: List[str] = []
    org_id: Optional[str] = None
