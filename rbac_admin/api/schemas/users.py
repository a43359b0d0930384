from pydantic import EmailStr, Field
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from rbac_admin.api.schemas.common import APIModel


class RoleSummary(APIModel):
    id: UUID
    name: str
    display_name: str


class UserCreate(APIModel):
    email: EmailStr
    password: str = Field(..., max_length=128)
    name: Optional[str] = Field(None, max_length=255)
    role_ids: List[UUID] = Field(default_factory=list)


class UserUpdate(APIModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, max_length=128)
    name: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None
    role_ids: Optional[List[UUID]] = None


class UserResponse(APIModel):
    id: UUID
    email: str
    name: Optional[str]
    image: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
    roles: List[RoleSummary] = Field(default_factory=list)
