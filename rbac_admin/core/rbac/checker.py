"""Permission checking utilities for RBAC Admin.

The predicates here are pure set operations over permission codes (or role
names). The FastAPI dependency that enforces them on routes lives in
``rbac_admin.api.deps``.
"""

from collections.abc import Iterable
from typing import Optional, Union


def _as_set(codes: Optional[Union[str, Iterable[str]]]) -> set[str]:
    if not codes:
        return set()
    if isinstance(codes, str):
        return {codes}
    return set(codes)


def has_any(subject_codes, required_codes) -> bool:
    """True iff at least one required code is held.

    An empty requirement is never satisfied here; callers decide what
    "nothing required" means (the menu filter treats it as public).
    """
    return not _as_set(subject_codes).isdisjoint(_as_set(required_codes))


def has_all(subject_codes, required_codes) -> bool:
    """True iff every required code is held (vacuously true when none are)."""
    return _as_set(required_codes) <= _as_set(subject_codes)


def has_role(role_names, required_roles) -> bool:
    """True iff the user holds any of ``required_roles`` (a name or names)."""
    return has_any(role_names, required_roles)


class PermissionChecker:
    """Checks permissions against a user's resolved permission set."""

    def __init__(self, user_permissions: Iterable[str], role_names: Optional[Iterable[str]] = None):
        """
        Initialize with the user's resolved permissions.

        Args:
            user_permissions: Permission codes granted through the user's roles
            role_names: Machine names of the user's roles
        """
        self.permissions = _as_set(user_permissions)
        self.roles = _as_set(role_names)

    def has_permission(self, permission: str) -> bool:
        """Check if user has a specific permission."""
        return permission in self.permissions

    def has_any_permission(self, permissions: Iterable[str]) -> bool:
        """Check if user has any of the given permissions."""
        return has_any(self.permissions, permissions)

    def has_all_permissions(self, permissions: Iterable[str]) -> bool:
        """Check if user has all of the given permissions."""
        return has_all(self.permissions, permissions)

    def has_role(self, role: Union[str, Iterable[str]]) -> bool:
        """Check if user holds the role (or any of the roles)."""
        return has_role(self.roles, role)
