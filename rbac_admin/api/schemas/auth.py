from pydantic import EmailStr, Field
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from rbac_admin.api.schemas.common import APIModel


class RegisterRequest(APIModel):
    email: EmailStr
    password: str = Field(..., max_length=128)
    name: Optional[str] = Field(None, max_length=255)


class Token(APIModel):
    access_token: str
    token_type: str = "bearer"


class RegisteredUser(APIModel):
    id: UUID
    email: str
    name: Optional[str]
    created_at: datetime


class CurrentUserResponse(APIModel):
    id: UUID
    email: str
    name: Optional[str]
    image: Optional[str] = None
    is_active: bool
    roles: List[str]
    permissions: List[str]
    is_admin: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class SessionInfo(APIModel):
    id: UUID
    jti: str
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime
    expires_at: datetime
