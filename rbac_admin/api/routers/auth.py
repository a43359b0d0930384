import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from rbac_admin.api.deps import get_current_user, get_db, oauth2_scheme
from rbac_admin.api.schemas.auth import (
    CurrentUserResponse,
    RegisteredUser,
    RegisterRequest,
    SessionInfo,
    Token,
)
from rbac_admin.core.config import get_settings
from rbac_admin.core.rbac import PermissionChecker, get_user_permissions, get_user_role_names
from rbac_admin.core.security import (
    active_sessions,
    create_access_token,
    decode_token_claims,
    get_password_hash,
    revoke_session,
    verify_password,
)
from rbac_admin.db.models import Role, User
from rbac_admin.db.models import Session as SessionModel

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()
logger = logging.getLogger(__name__)


def check_password_length(password: str) -> None:
    if len(password) < settings.password_min_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {settings.password_min_length} characters"
        )


@router.post("/register", response_model=RegisteredUser, status_code=status.HTTP_201_CREATED)
def register(user_in: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user with the default role."""
    check_password_length(user_in.password)

    existing_user = db.query(User).filter(User.email == user_in.email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    user = User(
        email=user_in.email,
        password_hash=get_password_hash(user_in.password),
        name=user_in.name,
    )

    default_role = db.query(Role).filter(Role.name == settings.default_role).first()
    if default_role:
        user.roles.append(default_role)
    else:
        logger.warning(
            "Default role '%s' not found; %s registered without roles",
            settings.default_role, user_in.email,
        )

    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Registered user %s", user.email)
    return user


@router.post("/login", response_model=Token)
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """Login and get access token with session tracking."""
    user = db.query(User).filter(User.email == form_data.username).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        logger.warning("Failed login for %s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    user.last_login = datetime.utcnow()
    db.commit()

    ip_address = request.client.host if request.client else None
    user_agent = request.headers.get("user-agent")

    access_token = create_access_token(
        user.id,
        db,
        ip_address=ip_address,
        user_agent=user_agent
    )
    return Token(access_token=access_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    token: Optional[str] = Depends(oauth2_scheme),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Revoke the session behind the presented token."""
    claims = decode_token_claims(token) or {}
    jti = claims.get("jti")
    if jti:
        revoke_session(jti, db)
        logger.info("User %s logged out", current_user.id)
    return None


@router.get("/me", response_model=CurrentUserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Current user with role names and effective permission codes."""
    permissions = get_user_permissions(current_user)
    role_names = get_user_role_names(current_user)
    checker = PermissionChecker(permissions, role_names)

    return CurrentUserResponse(
        id=current_user.id,
        email=current_user.email,
        name=current_user.name,
        image=current_user.image,
        is_active=current_user.is_active,
        roles=[role.name for role in current_user.roles],
        permissions=sorted(permissions),
        is_admin=checker.has_role(settings.admin_role),
        created_at=current_user.created_at,
        last_login=current_user.last_login,
    )


@router.get("/sessions", response_model=List[SessionInfo])
def list_sessions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all active sessions for current user."""
    return [
        SessionInfo(
            id=session.id,
            jti=session.token_jti,
            ip_address=session.ip_address,
            user_agent=session.user_agent,
            created_at=session.created_at,
            expires_at=session.expires_at,
        )
        for session in active_sessions(current_user.id, db)
    ]


@router.post("/sessions/{session_id}/revoke", status_code=status.HTTP_204_NO_CONTENT)
def revoke_session_endpoint(
    session_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Revoke one of the current user's sessions."""
    session = db.query(SessionModel).filter(
        SessionModel.id == session_id,
        SessionModel.user_id == current_user.id
    ).first()

    if not session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )

    revoke_session(session.token_jti, db)
    return None
