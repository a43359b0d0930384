"""Database seeding for RBAC Admin.

Installs the default permission catalogue, the admin/user/guest roles and
the default navigation menus. Every step is idempotent.

Usage:
    python -m rbac_admin.db.seed                      # seed defaults
    python -m rbac_admin.db.seed assign-admin [EMAIL] # grant the admin role
"""

import logging
import sys
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rbac_admin.core.config import get_settings
from rbac_admin.core.rbac.permissions import get_default_permission_definitions
from rbac_admin.core.rbac.roles import DEFAULT_MENUS, get_all_default_roles, get_default_role_permissions
from rbac_admin.db.models import Menu, Permission, Role, User
from rbac_admin.db.session import Database

logger = logging.getLogger(__name__)


class SeedError(RuntimeError):
    """Seeding cannot proceed with the current database contents."""


def seed_permissions(db: Session) -> Dict[str, Permission]:
    """Create missing default permissions. Returns all of them keyed by code."""
    existing = {p.code: p for p in db.query(Permission).all()}

    for definition in get_default_permission_definitions():
        if definition["code"] in existing:
            continue
        permission = Permission(**definition)
        db.add(permission)
        existing[permission.code] = permission

    db.flush()
    return existing


def _pick(permissions: Dict[str, Permission], codes: List[str]) -> List[Permission]:
    missing = [code for code in codes if code not in permissions]
    if missing:
        raise SeedError(f"Unknown permissions: {', '.join(missing)}")
    return [permissions[code] for code in codes]


def seed_default_roles(db: Session, permissions: Dict[str, Permission]) -> Dict[str, Role]:
    """
    Create the default roles and link their permissions.

    Existing roles keep any extra permissions an administrator granted;
    missing default links are added.
    """
    roles = {}

    for name, config in get_all_default_roles().items():
        role = db.query(Role).filter(Role.name == name).first()
        if role is None:
            role = Role(
                name=name,
                display_name=config["display_name"],
                description=config["description"],
            )
            db.add(role)

        linked = {p.code for p in role.permissions}
        for permission in _pick(permissions, get_default_role_permissions(name)):
            if permission.code not in linked:
                role.permissions.append(permission)

        roles[name] = role

    db.flush()
    return roles


def seed_default_menus(db: Session, permissions: Dict[str, Permission]) -> Dict[str, Menu]:
    """Create missing default menus; existing menus are left untouched."""
    menus = {m.code: m for m in db.query(Menu).all()}

    for config in DEFAULT_MENUS:
        if config["code"] in menus:
            continue

        parent_code = config.get("parent")
        parent = menus.get(parent_code) if parent_code else None
        if parent_code and parent is None:
            raise SeedError(f"Menu '{config['code']}' refers to unknown parent '{parent_code}'")

        menu = Menu(
            code=config["code"],
            name=config["name"],
            path=config["path"],
            icon=config["icon"],
            order=config["order"],
            parent=parent,
            permissions=_pick(permissions, config["permissions"]),
        )
        db.add(menu)
        db.flush()
        menus[menu.code] = menu

    return menus


def seed_defaults(db: Session) -> Tuple[Dict[str, Permission], Dict[str, Role], Dict[str, Menu]]:
    """Seed permissions, roles and menus. The caller commits."""
    permissions = seed_permissions(db)
    roles = seed_default_roles(db, permissions)
    menus = seed_default_menus(db, permissions)
    logger.info(
        "Seeded %d permissions, %d roles, %d menus",
        len(permissions), len(roles), len(menus),
    )
    return permissions, roles, menus


def assign_admin(db: Session, email: Optional[str] = None, role_name: Optional[str] = None) -> Tuple[User, bool]:
    """
    Grant the admin role to ``email`` (or the oldest user).

    Returns the user and whether the role was newly assigned.
    """
    role_name = role_name or get_settings().admin_role

    query = db.query(User)
    if email:
        user = query.filter(User.email == email).first()
    else:
        user = query.order_by(User.created_at.asc()).first()
    if user is None:
        raise SeedError(f"User not found: {email}" if email else "No users exist yet")

    role = db.query(Role).filter(Role.name == role_name).first()
    if role is None:
        raise SeedError(f"Role '{role_name}' not found; run the seed first")

    if role in user.roles:
        return user, False

    user.roles.append(role)
    db.flush()
    logger.info("Assigned role %s to %s", role.name, user.email)
    return user, True


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    database = Database.from_settings(get_settings())
    database.init()
    db = database.session()
    try:
        if argv and argv[0] == "assign-admin":
            email = argv[1] if len(argv) > 1 else None
            user, assigned = assign_admin(db, email)
            db.commit()
            if assigned:
                print(f"Granted admin role to {user.email}")
            else:
                print(f"{user.email} already has the admin role")
            return 0

        if argv:
            print(f"Unknown command: {argv[0]}")
            print(__doc__)
            return 2

        permissions, roles, menus = seed_defaults(db)
        db.commit()

        print(f"Permissions: {len(permissions)}")
        print(f"Roles: {len(roles)}")
        for role in roles.values():
            print(f"  - {role.name}: {len(role.permissions)} permissions")
        print(f"Menus: {len(menus)}")
        print("\nSeeding complete!")
        return 0

    except (SeedError, SQLAlchemyError) as e:
        db.rollback()
        print(f"Error: {e}")
        return 1
    finally:
        db.close()
        database.shutdown()


if __name__ == "__main__":
    sys.exit(main())
