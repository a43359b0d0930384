"""API routers for RBAC Admin."""

from . import auth
from . import users
from . import roles
from . import permissions
from . import menus
from . import system_menus
from . import analytics
from . import health

__all__ = [
    "auth",
    "users",
    "roles",
    "permissions",
    "menus",
    "system_menus",
    "analytics",
    "health",
]
