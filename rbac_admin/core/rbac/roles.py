"""Default role and menu definitions for RBAC Admin.

Defines the 3 standard roles with their permission sets:
1. admin - Every permission in the default catalogue
2. user - Dashboard, menus and read access to users
3. guest - Dashboard and menus only

and the default navigation menus with the permissions that unlock them.
"""

from typing import Dict, List

from .permissions import DEFAULT_PERMISSIONS


# Admin: every default permission
ADMIN_PERMISSIONS = list(DEFAULT_PERMISSIONS)

# User: basic access
USER_PERMISSIONS = [
    "user:read",
    "dashboard:read",
    "menu:read",
]

# Guest: read-only dashboard
GUEST_PERMISSIONS = [
    "dashboard:read",
    "menu:read",
]


DEFAULT_ROLES: Dict[str, dict] = {
    "admin": {
        "display_name": "Administrator",
        "description": "System administrator with all permissions",
        "permissions": ADMIN_PERMISSIONS,
    },
    "user": {
        "display_name": "User",
        "description": "Regular user with basic permissions",
        "permissions": USER_PERMISSIONS,
    },
    "guest": {
        "display_name": "Guest",
        "description": "Guest user with read-only access",
        "permissions": GUEST_PERMISSIONS,
    },
}


# Default menus, parents before children. "parent" refers to another menu code.
DEFAULT_MENUS: List[dict] = [
    {
        "code": "dashboard",
        "name": "Dashboard",
        "path": "/",
        "icon": "dashboard",
        "order": 1,
        "permissions": ["dashboard:read"],
    },
    {
        "code": "users",
        "name": "User Management",
        "path": "/users",
        "icon": "users",
        "order": 2,
        "permissions": ["user:read"],
    },
    {
        "code": "system",
        "name": "System",
        "path": None,
        "icon": "settings",
        "order": 3,
        "permissions": [],
    },
    {
        "code": "roles",
        "name": "Role Management",
        "path": "/system/roles",
        "icon": "shield",
        "parent": "system",
        "order": 1,
        "permissions": ["role:read"],
    },
    {
        "code": "menus",
        "name": "Menu Management",
        "path": "/system/menus",
        "icon": "list",
        "parent": "system",
        "order": 2,
        "permissions": ["menu:read"],
    },
    {
        "code": "analytics",
        "name": "Sales Analytics",
        "path": "/analytics",
        "icon": "chart",
        "order": 4,
        "permissions": ["dashboard:read"],
    },
]


def get_default_role_permissions(role_key: str) -> List[str]:
    """Get permissions list for a default role."""
    role = DEFAULT_ROLES.get(role_key)
    if not role:
        raise ValueError(f"Unknown default role: {role_key}")
    return role["permissions"]


def get_all_default_roles() -> Dict[str, dict]:
    """Get all default role definitions."""
    return DEFAULT_ROLES.copy()
