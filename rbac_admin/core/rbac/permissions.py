"""Permission model for RBAC Admin.

Permissions are stored in the database, but every code follows the same
shape and the service ships a default catalogue that seeding installs.

Permission string format: "resource:action"
Examples:
  - user:read
  - role:write
  - menu:read
  - dashboard:read
"""

import re
from typing import NamedTuple


CODE_PATTERN = re.compile(r"[a-z][a-z0-9_]*:[a-z][a-z0-9_]*")


class PermissionCode(NamedTuple):
    """A permission code split into its resource and action."""
    resource: str
    action: str

    def __str__(self) -> str:
        return f"{self.resource}:{self.action}"

    @classmethod
    def from_string(cls, code: str) -> "PermissionCode":
        """Parse a permission string like 'user:read'."""
        if not isinstance(code, str) or not CODE_PATTERN.fullmatch(code):
            raise ValueError(f"Invalid permission format: {code}")
        resource, action = code.split(":")
        return cls(resource, action)


def is_valid_permission_code(code: str) -> bool:
    """Check if a string has the ``resource:action`` shape."""
    return isinstance(code, str) and CODE_PATTERN.fullmatch(code) is not None


# Default permission catalogue: code -> (display name, description)
DEFAULT_PERMISSIONS: dict[str, tuple[str, str]] = {
    # User management
    "user:read": ("View users", "Can view user accounts"),
    "user:write": ("Edit users", "Can create and edit user accounts"),
    "user:delete": ("Delete users", "Can delete user accounts"),
    # Role management
    "role:read": ("View roles", "Can view roles"),
    "role:write": ("Edit roles", "Can create, edit and delete roles"),
    # Permission management
    "permission:read": ("View permissions", "Can view permissions"),
    "permission:write": ("Edit permissions", "Can create and delete permissions"),
    # Menu management
    "menu:read": ("View menus", "Can view menu configuration"),
    "menu:write": ("Edit menus", "Can create, edit and delete menus"),
    # Dashboard / analytics
    "dashboard:read": ("View dashboard", "Can view the sales dashboard"),
    # Administrator
    "admin:all": ("All administrator permissions", "Marks a full administrator"),
}


def get_default_permission_definitions() -> list[dict]:
    """Default permissions as rows ready for insertion."""
    rows = []
    for code, (name, description) in DEFAULT_PERMISSIONS.items():
        parsed = PermissionCode.from_string(code)
        rows.append({
            "code": code,
            "name": name,
            "description": description,
            "resource": parsed.resource,
            "action": parsed.action,
        })
    return rows
