"""Permission catalogue endpoints."""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import Field
from sqlalchemy.orm import Session

from rbac_admin.api.deps import get_db, require_permission
from rbac_admin.api.schemas.common import APIModel
from rbac_admin.core.rbac import PermissionCode
from rbac_admin.db.models import Permission, User

router = APIRouter(prefix="/permissions", tags=["permissions"])
logger = logging.getLogger(__name__)


# Schemas
class PermissionCreate(APIModel):
    code: str = Field(..., min_length=3, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None

class PermissionResponse(APIModel):
    id: UUID
    code: str
    name: str
    description: Optional[str]
    resource: str
    action: str
    created_at: datetime


# Endpoints
@router.get("", response_model=List[PermissionResponse])
def list_permissions(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:read")),
):
    """All permissions, grouped by resource then action."""
    return (
        db.query(Permission)
        .order_by(Permission.resource.asc(), Permission.action.asc())
        .all()
    )


@router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
def create_permission(
    permission_data: PermissionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:write")),
):
    """Create a permission; resource and action come from the code."""
    try:
        parsed = PermissionCode.from_string(permission_data.code)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    code = str(parsed)
    if db.query(Permission).filter(Permission.code == code).first():
        raise HTTPException(status_code=400, detail="Permission with this code already exists")

    permission = Permission(
        code=code,
        name=permission_data.name,
        description=permission_data.description,
        resource=parsed.resource,
        action=parsed.action,
    )
    db.add(permission)
    db.commit()
    db.refresh(permission)

    logger.info("Permission %s created by %s", code, current_user.id)
    return permission


@router.delete("/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_permission(
    permission_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:write")),
):
    permission = db.query(Permission).filter(Permission.id == permission_id).first()
    if not permission:
        raise HTTPException(status_code=404, detail="Permission not found")

    code = permission.code
    db.delete(permission)
    db.commit()

    logger.info("Permission %s deleted by %s", code, current_user.id)
    return None
