"""Resolve the permission codes a user holds through their roles."""

from collections.abc import Iterable


def _iter_items(value) -> Iterable:
    # Strings are iterable but never a collection of roles or permissions
    if value is None or isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return ()
    return value


def resolve_permissions(roles) -> set[str]:
    """
    Collect the de-duplicated permission codes granted by a set of roles.

    Each role is anything with a ``permissions`` collection whose items
    carry a ``code`` (ORM ``Permission`` rows) or are code strings.
    Missing or malformed input yields an empty set.
    """
    codes: set[str] = set()
    for role in _iter_items(roles):
        for permission in _iter_items(getattr(role, "permissions", None)):
            code = permission if isinstance(permission, str) else getattr(permission, "code", None)
            if code:
                codes.add(code)
    return codes


def resolve_role_names(roles) -> list[str]:
    """Machine names of the given roles, in assignment order, without duplicates."""
    names: list[str] = []
    for role in _iter_items(roles):
        name = getattr(role, "name", None)
        if name and name not in names:
            names.append(name)
    return names


def get_user_permissions(user) -> set[str]:
    """Permission codes held by ``user`` through all of its roles."""
    if user is None:
        return set()
    return resolve_permissions(getattr(user, "roles", None))


def get_user_role_names(user) -> list[str]:
    """Role machine names assigned to ``user``."""
    if user is None:
        return []
    return resolve_role_names(getattr(user, "roles", None))
