"""RBAC admin panel API: users, roles, permissions, menus and a sales dashboard."""

__version__ = "0.1.0"
