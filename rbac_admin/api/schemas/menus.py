from pydantic import Field
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from rbac_admin.api.schemas.common import APIModel


class PermissionSummary(APIModel):
    id: UUID
    code: str
    name: str


class MenuParent(APIModel):
    id: UUID
    code: str
    name: str


class MenuTreeNode(APIModel):
    """A node of the navigation tree returned to clients."""
    id: UUID
    code: str
    name: str
    path: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Optional[UUID] = None
    order: int
    is_visible: bool
    children: List["MenuTreeNode"] = Field(default_factory=list)


class MenuTreeResponse(APIModel):
    menus: List[MenuTreeNode]


class MenuAccessResponse(APIModel):
    code: str
    accessible: bool


class MenuCreate(APIModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    path: Optional[str] = Field(None, max_length=255)
    icon: Optional[str] = Field(None, max_length=100)
    parent_id: Optional[UUID] = None
    order: int = 0
    is_visible: bool = True
    permission_ids: List[UUID] = Field(default_factory=list)


class MenuUpdate(APIModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    path: Optional[str] = Field(None, max_length=255)
    icon: Optional[str] = Field(None, max_length=100)
    parent_id: Optional[UUID] = None
    order: Optional[int] = None
    is_visible: Optional[bool] = None
    permission_ids: Optional[List[UUID]] = None


class MenuResponse(APIModel):
    id: UUID
    code: str
    name: str
    path: Optional[str]
    icon: Optional[str]
    parent_id: Optional[UUID]
    parent: Optional[MenuParent] = None
    order: int
    is_visible: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    permissions: List[PermissionSummary] = Field(default_factory=list)


MenuTreeNode.model_rebuild()
