"""Seed default permissions, roles and menus

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

Installs the admin, user and guest roles, the default permission catalogue
and the default navigation menus.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.orm import Session

from rbac_admin.core.rbac.permissions import DEFAULT_PERMISSIONS
from rbac_admin.core.rbac.roles import DEFAULT_MENUS, DEFAULT_ROLES
from rbac_admin.db.seed import seed_defaults

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, Sequence[str], None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Seed defaults through the ORM inside the migration transaction."""
    session = Session(bind=op.get_bind())
    try:
        seed_defaults(session)
        session.flush()
    finally:
        session.close()


def downgrade() -> None:
    """Remove seeded menus, roles and permissions."""
    connection = op.get_bind()
    menus = sa.table("menus", sa.column("id"), sa.column("code"))
    roles = sa.table("roles", sa.column("id"), sa.column("name"))
    permissions = sa.table("permissions", sa.column("id"), sa.column("code"))
    user_roles = sa.table("user_roles", sa.column("role_id"))
    role_permissions = sa.table("role_permissions", sa.column("role_id"), sa.column("permission_id"))
    menu_permissions = sa.table("menu_permissions", sa.column("menu_id"), sa.column("permission_id"))

    menu_ids = sa.select(menus.c.id).where(menus.c.code.in_([m["code"] for m in DEFAULT_MENUS]))
    role_ids = sa.select(roles.c.id).where(roles.c.name.in_(list(DEFAULT_ROLES)))
    permission_ids = sa.select(permissions.c.id).where(permissions.c.code.in_(list(DEFAULT_PERMISSIONS)))

    # Link rows first; SQLite does not enforce ON DELETE CASCADE by default
    connection.execute(menu_permissions.delete().where(
        sa.or_(menu_permissions.c.menu_id.in_(menu_ids), menu_permissions.c.permission_id.in_(permission_ids))
    ))
    connection.execute(role_permissions.delete().where(
        sa.or_(role_permissions.c.role_id.in_(role_ids), role_permissions.c.permission_id.in_(permission_ids))
    ))
    connection.execute(user_roles.delete().where(user_roles.c.role_id.in_(role_ids)))

    # Children before parents
    child_codes = [m["code"] for m in DEFAULT_MENUS if m.get("parent")]
    parent_codes = [m["code"] for m in DEFAULT_MENUS if not m.get("parent")]
    connection.execute(menus.delete().where(menus.c.code.in_(child_codes)))
    connection.execute(menus.delete().where(menus.c.code.in_(parent_codes)))
    connection.execute(roles.delete().where(roles.c.name.in_(list(DEFAULT_ROLES))))
    connection.execute(permissions.delete().where(permissions.c.code.in_(list(DEFAULT_PERMISSIONS))))
