"""Factory functions for creating test database records.

Each factory creates a model instance, adds it to the session, and flushes
so that database-generated fields (id, created_at, etc.) are populated.
All fields have sensible defaults but can be overridden via keyword arguments.

Usage::

    from tests.factories import create_permission, create_role, create_user

    def test_something(db_session):
        perm = create_permission(db_session, code="user:read")
        role = create_role(db_session, permissions=[perm])
        user = create_user(db_session, roles=[role])
        assert user.roles[0].permissions[0].code == "user:read"
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from rbac_admin.core.security import get_password_hash
from rbac_admin.db.models import Menu, Permission, Role, User


_counter = 0

TEST_PASSWORD = "testpass123"


def _next_id() -> int:
    """Return a monotonically increasing integer for unique default values."""
    global _counter
    _counter += 1
    return _counter


# ---------------------------------------------------------------------------
# Permission
# ---------------------------------------------------------------------------


def create_permission(
    session: Session,
    *,
    code: Optional[str] = None,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Permission:
    code = code or f"resource{_next_id()}:read"
    resource, action = code.split(":")
    permission = Permission(
        code=code,
        name=name or code,
        description=description,
        resource=resource,
        action=action,
    )
    session.add(permission)
    session.flush()
    return permission


def get_or_create_permission(session: Session, code: str) -> Permission:
    existing = session.query(Permission).filter(Permission.code == code).first()
    return existing or create_permission(session, code=code)


# ---------------------------------------------------------------------------
# Role
# ---------------------------------------------------------------------------


def create_role(
    session: Session,
    *,
    name: Optional[str] = None,
    display_name: Optional[str] = None,
    description: Optional[str] = None,
    permissions: Iterable[Permission] = (),
    created_at: Optional[datetime] = None,
) -> Role:
    n = _next_id()
    role = Role(
        name=name or f"role_{n}",
        display_name=display_name or f"Role {n}",
        description=description,
        permissions=list(permissions),
    )
    if created_at is not None:
        role.created_at = created_at
    session.add(role)
    session.flush()
    return role


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


def create_user(
    session: Session,
    *,
    email: Optional[str] = None,
    password: str = TEST_PASSWORD,
    name: Optional[str] = None,
    roles: Iterable[Role] = (),
    is_active: bool = True,
    created_at: Optional[datetime] = None,
) -> User:
    n = _next_id()
    user = User(
        email=email or f"user{n}@example.com",
        password_hash=get_password_hash(password),
        name=name or f"Test User {n}",
        is_active=is_active,
        roles=list(roles),
    )
    if created_at is not None:
        user.created_at = created_at
    session.add(user)
    session.flush()
    return user


# ---------------------------------------------------------------------------
# Menu
# ---------------------------------------------------------------------------


def create_menu(
    session: Session,
    *,
    code: Optional[str] = None,
    name: Optional[str] = None,
    path: Optional[str] = None,
    icon: Optional[str] = None,
    parent: Optional[Menu] = None,
    order: int = 0,
    is_visible: bool = True,
    permissions: Iterable[Permission] = (),
    created_at: Optional[datetime] = None,
) -> Menu:
    n = _next_id()
    menu = Menu(
        code=code or f"menu_{n}",
        name=name or f"Menu {n}",
        path=path if path is not None else f"/menu-{n}",
        icon=icon,
        parent=parent,
        order=order,
        is_visible=is_visible,
        permissions=list(permissions),
    )
    if created_at is not None:
        menu.created_at = created_at
    session.add(menu)
    session.flush()
    return menu


def days_ago(days: int) -> datetime:
    return datetime.utcnow() - timedelta(days=days)
