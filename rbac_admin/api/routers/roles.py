"""Role management API endpoints."""

import logging
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import Field
from slugify import slugify
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from rbac_admin.api.deps import get_db, require_permission, search_pattern
from rbac_admin.api.schemas.common import APIModel
from rbac_admin.api.schemas.menus import PermissionSummary
from rbac_admin.db.models import Permission, Role, User, user_roles

router = APIRouter(prefix="/roles", tags=["roles"])
logger = logging.getLogger(__name__)


# Schemas
class RoleCreate(APIModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    permission_ids: List[UUID] = Field(default_factory=list)

class RoleUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    permission_ids: Optional[List[UUID]] = None

class RoleResponse(APIModel):
    id: UUID
    name: str
    display_name: str
    description: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime] = None
    permissions: List[PermissionSummary] = Field(default_factory=list)
    user_count: int = 0


def count_users(db: Session, role_ids: List[UUID]) -> Dict[UUID, int]:
    """Number of assigned users per role id."""
    if not role_ids:
        return {}
    rows = (
        db.query(user_roles.c.role_id, func.count(user_roles.c.user_id))
        .filter(user_roles.c.role_id.in_(role_ids))
        .group_by(user_roles.c.role_id)
        .all()
    )
    return {role_id: count for role_id, count in rows}


def to_response(role: Role, user_count: int) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        name=role.name,
        display_name=role.display_name,
        description=role.description,
        created_at=role.created_at,
        updated_at=role.updated_at,
        permissions=[PermissionSummary.model_validate(p) for p in role.permissions],
        user_count=user_count,
    )


def get_role_or_404(db: Session, role_id: UUID) -> Role:
    role = (
        db.query(Role)
        .options(selectinload(Role.permissions))
        .filter(Role.id == role_id)
        .first()
    )
    if not role:
        raise HTTPException(status_code=404, detail="Role not found")
    return role


def load_permissions(db: Session, permission_ids: List[UUID]) -> List[Permission]:
    if not permission_ids:
        return []
    wanted = set(permission_ids)
    permissions = db.query(Permission).filter(Permission.id.in_(wanted)).all()
    if len(permissions) != len(wanted):
        raise HTTPException(status_code=400, detail="One or more permissions do not exist")
    return permissions


# Endpoints
@router.get("", response_model=List[RoleResponse])
def list_roles(
    search: Optional[str] = Query(None, description="Match against name or display name"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("role:read")),
):
    """List roles with their permissions and user counts, oldest first."""
    query = db.query(Role).options(selectinload(Role.permissions))

    if search:
        pattern = search_pattern(search)
        query = query.filter(or_(
            Role.name.ilike(pattern, escape="\\"),
            Role.display_name.ilike(pattern, escape="\\"),
        ))

    roles = query.order_by(Role.created_at.asc()).all()
    counts = count_users(db, [r.id for r in roles])

    return [to_response(r, counts.get(r.id, 0)) for r in roles]


@router.get("/{role_id}", response_model=RoleResponse)
def get_role(
    role_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("role:read")),
):
    role = get_role_or_404(db, role_id)
    return to_response(role, count_users(db, [role.id]).get(role.id, 0))


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
def create_role(
    role_data: RoleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("role:write")),
):
    """Create a role. The name defaults to a slug of the display name."""
    name = role_data.name or slugify(role_data.display_name, separator="_")
    if not name:
        raise HTTPException(status_code=400, detail="Role name cannot be derived from display name")

    if db.query(Role).filter(Role.name == name).first():
        raise HTTPException(status_code=400, detail="Role with this name already exists")

    role = Role(
        name=name,
        display_name=role_data.display_name,
        description=role_data.description,
        permissions=load_permissions(db, role_data.permission_ids),
    )
    db.add(role)
    db.commit()
    db.refresh(role)

    logger.info("Role %s created by %s", role.name, current_user.id)
    return to_response(role, 0)


@router.patch("/{role_id}", response_model=RoleResponse)
def update_role(
    role_id: UUID,
    role_data: RoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("role:write")),
):
    """Update a role. The machine name cannot change."""
    role = get_role_or_404(db, role_id)
    data = role_data.model_dump(exclude_unset=True)

    if data.get("name") is not None and data["name"] != role.name:
        raise HTTPException(status_code=400, detail="Role name cannot be changed")

    if data.get("display_name") is not None:
        role.display_name = data["display_name"]

    if "description" in data:
        role.description = data["description"]

    if data.get("permission_ids") is not None:
        role.permissions = load_permissions(db, data["permission_ids"])

    db.commit()
    db.refresh(role)

    logger.info("Role %s updated by %s", role.name, current_user.id)
    return to_response(role, count_users(db, [role.id]).get(role.id, 0))


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_role(
    role_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("role:write")),
):
    """Delete a role that no user holds."""
    role = get_role_or_404(db, role_id)

    assigned = count_users(db, [role.id]).get(role.id, 0)
    if assigned:
        raise HTTPException(
            status_code=400,
            detail=f"Role is assigned to {assigned} user(s) and cannot be deleted"
        )

    role_name = role.name
    db.delete(role)
    db.commit()

    logger.info("Role %s deleted by %s", role_name, current_user.id)
    return None
