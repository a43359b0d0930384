"""RBAC (Role-Based Access Control) module for RBAC Admin.

This module defines permission codes, permission resolution, access checks,
and menu filtering / tree construction.
"""

from .permissions import PermissionCode, DEFAULT_PERMISSIONS, is_valid_permission_code
from .checker import PermissionChecker, has_any, has_all, has_role
from .resolver import (
    resolve_permissions,
    resolve_role_names,
    get_user_permissions,
    get_user_role_names,
)
from .menus import (
    MenuRecord,
    MenuNode,
    is_menu_accessible,
    filter_accessible_menus,
    build_menu_tree,
    find_menu,
    menu_in_tree,
    count_nodes,
    would_create_cycle,
)

__all__ = [
    "PermissionCode",
    "DEFAULT_PERMISSIONS",
    "is_valid_permission_code",
    "PermissionChecker",
    "has_any",
    "has_all",
    "has_role",
    "resolve_permissions",
    "resolve_role_names",
    "get_user_permissions",
    "get_user_role_names",
    "MenuRecord",
    "MenuNode",
    "is_menu_accessible",
    "filter_accessible_menus",
    "build_menu_tree",
    "find_menu",
    "menu_in_tree",
    "count_nodes",
    "would_create_cycle",
]
