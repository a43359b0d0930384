"""Menu administration endpoints."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload

from rbac_admin.api.deps import get_db, require_permission
from rbac_admin.api.routers.roles import load_permissions
from rbac_admin.api.schemas.menus import MenuCreate, MenuResponse, MenuUpdate
from rbac_admin.db.models import Menu, User
from rbac_admin.services.menus import MenuValidationError, validate_parent

router = APIRouter(prefix="/system/menus", tags=["system"])
logger = logging.getLogger(__name__)


def get_menu_or_404(db: Session, menu_id: UUID) -> Menu:
    menu = (
        db.query(Menu)
        .options(selectinload(Menu.permissions), selectinload(Menu.parent))
        .filter(Menu.id == menu_id)
        .first()
    )
    if not menu:
        raise HTTPException(status_code=404, detail="Menu not found")
    return menu


@router.get("", response_model=List[MenuResponse])
def list_menus(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("menu:read")),
):
    """Every menu, hidden ones included, as a flat ordered list."""
    return (
        db.query(Menu)
        .options(selectinload(Menu.permissions), selectinload(Menu.parent))
        .order_by(Menu.order.asc(), Menu.created_at.asc())
        .all()
    )


@router.get("/{menu_id}", response_model=MenuResponse)
def get_menu(
    menu_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("menu:read")),
):
    return get_menu_or_404(db, menu_id)


@router.post("", response_model=MenuResponse, status_code=status.HTTP_201_CREATED)
def create_menu(
    menu_data: MenuCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("menu:write")),
):
    if db.query(Menu).filter(Menu.code == menu_data.code).first():
        raise HTTPException(status_code=400, detail="Menu with this code already exists")

    try:
        validate_parent(db, None, menu_data.parent_id)
    except MenuValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    menu = Menu(
        code=menu_data.code,
        name=menu_data.name,
        path=menu_data.path,
        icon=menu_data.icon,
        parent_id=menu_data.parent_id,
        order=menu_data.order,
        is_visible=menu_data.is_visible,
        permissions=load_permissions(db, menu_data.permission_ids),
    )
    db.add(menu)
    db.commit()
    db.refresh(menu)

    logger.info("Menu %s created by %s", menu.code, current_user.id)
    return menu


@router.patch("/{menu_id}", response_model=MenuResponse)
def update_menu(
    menu_id: UUID,
    menu_data: MenuUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("menu:write")),
):
    """
    Partially update a menu.

    An explicit ``parentId: null`` moves the menu to the root. The code
    cannot change, and a new parent must exist and must not be the menu
    itself or one of its descendants.
    """
    menu = get_menu_or_404(db, menu_id)
    data = menu_data.model_dump(exclude_unset=True)

    if data.get("code") is not None and data["code"] != menu.code:
        raise HTTPException(status_code=400, detail="Menu code cannot be changed")

    if "parent_id" in data:
        try:
            validate_parent(db, menu.id, data["parent_id"])
        except MenuValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        menu.parent_id = data["parent_id"]

    for field in ("name", "order", "is_visible"):
        if data.get(field) is not None:
            setattr(menu, field, data[field])

    for field in ("path", "icon"):
        if field in data:
            setattr(menu, field, data[field])

    if data.get("permission_ids") is not None:
        menu.permissions = load_permissions(db, data["permission_ids"])

    db.commit()
    db.refresh(menu)

    logger.info("Menu %s updated by %s", menu.code, current_user.id)
    return menu


@router.delete("/{menu_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu(
    menu_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("menu:write")),
):
    """Delete a leaf menu."""
    menu = get_menu_or_404(db, menu_id)

    if db.query(Menu.id).filter(Menu.parent_id == menu.id).first() is not None:
        raise HTTPException(status_code=400, detail="Menu has child menus and cannot be deleted")

    code = menu.code
    db.delete(menu)
    db.commit()

    logger.info("Menu %s deleted by %s", code, current_user.id)
    return None
