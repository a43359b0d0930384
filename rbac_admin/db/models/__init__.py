"""Database models for RBAC Admin."""

from rbac_admin.db.models.associations import user_roles, role_permissions, menu_permissions
from rbac_admin.db.models.user import User
from rbac_admin.db.models.role import Role
from rbac_admin.db.models.permission import Permission
from rbac_admin.db.models.menu import Menu
from rbac_admin.db.models.session import Session

__all__ = [
    "user_roles",
    "role_permissions",
    "menu_permissions",
    "User",
    "Role",
    "Permission",
    "Menu",
    "Session",
]
