"""Menu queries and mutation checks.

Bridges the ORM and the pure menu functions in ``rbac_admin.core.rbac``:
loads ordered snapshots, builds per-user trees, and validates parent
changes before they are written.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from rbac_admin.core.rbac import (
    MenuNode,
    MenuRecord,
    build_menu_tree,
    filter_accessible_menus,
    get_user_permissions,
    menu_in_tree,
    would_create_cycle,
)
from rbac_admin.db.models import Menu, User

logger = logging.getLogger(__name__)


class MenuValidationError(ValueError):
    """A requested menu change would break a menu invariant."""


def to_record(menu: Menu) -> MenuRecord:
    return MenuRecord(
        id=menu.id,
        code=menu.code,
        name=menu.name,
        path=menu.path,
        icon=menu.icon,
        parent_id=menu.parent_id,
        order=menu.order,
        is_visible=menu.is_visible,
        required_permissions=tuple(p.code for p in menu.permissions),
    )


def load_menu_records(db: Session, visible_only: bool = True) -> list[MenuRecord]:
    """Menus ordered by (order, created_at), with their required permission codes."""
    query = db.query(Menu).options(selectinload(Menu.permissions))
    if visible_only:
        query = query.filter(Menu.is_visible.is_(True))
    menus = query.order_by(Menu.order.asc(), Menu.created_at.asc()).all()
    return [to_record(menu) for menu in menus]


def get_user_menu_tree(db: Session, user: Optional[User]) -> list[MenuNode]:
    """Navigation tree for ``user``: resolve, filter, then build."""
    permissions = get_user_permissions(user)
    records = load_menu_records(db)
    accessible = filter_accessible_menus(records, permissions)
    logger.debug(
        "Menu tree for user %s: %d of %d menus accessible",
        getattr(user, "id", None), len(accessible), len(records),
    )
    return build_menu_tree(accessible)


def can_access_menu(db: Session, user: Optional[User], menu_code: str) -> bool:
    """Whether ``menu_code`` appears anywhere in the user's menu tree."""
    return menu_in_tree(get_user_menu_tree(db, user), menu_code)


def validate_parent(db: Session, menu_id: Optional[UUID], parent_id: Optional[UUID]) -> None:
    """
    Check that ``parent_id`` is an acceptable parent for ``menu_id``.

    ``menu_id`` is None for a menu that does not exist yet, which cannot be
    part of any cycle. Raises MenuValidationError on failure.
    """
    if parent_id is None:
        return
    if menu_id is not None and parent_id == menu_id:
        raise MenuValidationError("A menu cannot be its own parent")

    if db.query(Menu.id).filter(Menu.id == parent_id).first() is None:
        raise MenuValidationError("Parent menu does not exist")

    if menu_id is None:
        return

    parent_of = dict(db.query(Menu.id, Menu.parent_id).all())
    if would_create_cycle(menu_id, parent_id, parent_of):
        raise MenuValidationError("Parent menu would create a cycle")
