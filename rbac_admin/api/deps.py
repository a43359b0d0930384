from typing import Generator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session, selectinload

from rbac_admin.core.rbac import PermissionChecker, get_user_permissions
from rbac_admin.core.security import decode_token
from rbac_admin.db.analytics import AnalyticsDatabase
from rbac_admin.db.models import Role, User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_db(request: Request) -> Generator:
    """Database session dependency."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_analytics_db(request: Request) -> AnalyticsDatabase:
    """Analytics database handle; routes open their own connections."""
    return request.app.state.analytics_db


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme),
) -> User:
    """Get current authenticated user from the bearer JWT."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    user_id = decode_token(token, db)
    if user_id is None:
        raise credentials_exception

    user = (
        db.query(User)
        .options(selectinload(User.roles).selectinload(Role.permissions))
        .filter(User.id == user_id)
        .first()
    )
    if user is None or not user.is_active:
        raise credentials_exception

    # Picked up by the request logging middleware
    request.state.user = user
    return user


class PermissionDependency:
    """
    FastAPI dependency enforcing permission codes on a route.

    Permissions are resolved from the user's roles on every request.

    Usage:
        @router.get("/users")
        def list_users(current_user: User = Depends(require_permission("user:read"))):
            ...
    """

    def __init__(self, *permissions: str, require_all: bool = False):
        self.permissions = permissions
        self.require_all = require_all

    def __call__(self, current_user: User = Depends(get_current_user)) -> User:
        checker = PermissionChecker(get_user_permissions(current_user))

        if self.require_all:
            has_access = checker.has_all_permissions(self.permissions)
        else:
            has_access = checker.has_any_permission(self.permissions)

        if not has_access:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {', '.join(self.permissions)}"
            )

        return current_user


def require_permission(*permissions: str, require_all: bool = False) -> PermissionDependency:
    """Build a dependency requiring any (or all) of ``permissions``."""
    return PermissionDependency(*permissions, require_all=require_all)


def search_pattern(search: str) -> str:
    """``ilike`` pattern matching ``search`` literally anywhere, escaped with a backslash."""
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
