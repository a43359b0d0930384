"""User management API endpoints."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from rbac_admin.api.deps import get_db, oauth2_scheme, require_permission, search_pattern
from rbac_admin.api.schemas.common import PaginatedResponse
from rbac_admin.api.schemas.users import UserCreate, UserResponse, UserUpdate
from rbac_admin.core.config import get_settings
from rbac_admin.core.security import decode_token_claims, get_password_hash, revoke_user_sessions
from rbac_admin.db.models import Role, User

router = APIRouter(prefix="/users", tags=["users"])
settings = get_settings()
logger = logging.getLogger(__name__)


def get_user_or_404(db: Session, user_id: UUID) -> User:
    user = (
        db.query(User)
        .options(selectinload(User.roles))
        .filter(User.id == user_id)
        .first()
    )
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def load_roles(db: Session, role_ids: List[UUID]) -> List[Role]:
    """Fetch roles by id; every id must exist."""
    if not role_ids:
        return []
    wanted = set(role_ids)
    roles = db.query(Role).filter(Role.id.in_(wanted)).all()
    if len(roles) != len(wanted):
        raise HTTPException(status_code=400, detail="One or more roles do not exist")
    return roles


def check_password_length(password: str) -> None:
    if len(password) < settings.password_min_length:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {settings.password_min_length} characters"
        )


@router.get("", response_model=PaginatedResponse[UserResponse])
def list_users(
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100, alias="perPage"),
    search: Optional[str] = Query(None, description="Match against name or email"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user:read")),
):
    """List users, newest first."""
    query = db.query(User)

    if search:
        pattern = search_pattern(search)
        query = query.filter(or_(
            User.name.ilike(pattern, escape="\\"),
            User.email.ilike(pattern, escape="\\"),
        ))

    total = query.count()
    users = (
        query.options(selectinload(User.roles))
        .order_by(User.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )

    return PaginatedResponse[UserResponse].create(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user:read")),
):
    return get_user_or_404(db, user_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user:write")),
):
    """Create a user with an explicit set of roles."""
    check_password_length(user_in.password)

    if db.query(User).filter(User.email == user_in.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=user_in.email,
        password_hash=get_password_hash(user_in.password),
        name=user_in.name,
        roles=load_roles(db, user_in.role_ids),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("User %s created by %s", user.email, current_user.id)
    return user


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: UUID,
    user_in: UserUpdate,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user:write")),
):
    """
    Partially update a user.

    A password change revokes the user's other sessions; ``roleIds``
    replaces the current role assignments.
    """
    user = get_user_or_404(db, user_id)
    data = user_in.model_dump(exclude_unset=True)

    if data.get("email") is not None and data["email"] != user.email:
        clash = db.query(User).filter(User.email == data["email"], User.id != user.id).first()
        if clash:
            raise HTTPException(status_code=400, detail="Email already registered")
        user.email = data["email"]

    if "name" in data:
        user.name = data["name"]

    if data.get("is_active") is not None:
        user.is_active = data["is_active"]

    if data.get("role_ids") is not None:
        user.roles = load_roles(db, data["role_ids"])

    password_changed = False
    if data.get("password") is not None:
        check_password_length(data["password"])
        user.password_hash = get_password_hash(data["password"])
        password_changed = True

    db.commit()

    if password_changed:
        keep_jti = None
        if user.id == current_user.id:
            keep_jti = (decode_token_claims(token) or {}).get("jti") if token else None
        revoked = revoke_user_sessions(user.id, db, except_jti=keep_jti)
        logger.info("Password changed for user %s; %d sessions revoked", user.id, revoked)

    db.refresh(user)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user:delete")),
):
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user = get_user_or_404(db, user_id)
    db.delete(user)
    db.commit()

    logger.info("User %s deleted by %s", user_id, current_user.id)
    return None
