"""Navigation menus for the signed-in user."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rbac_admin.api.deps import get_current_user, get_db
from rbac_admin.api.schemas.menus import MenuAccessResponse, MenuTreeNode, MenuTreeResponse
from rbac_admin.db.models import User
from rbac_admin.services.menus import can_access_menu, get_user_menu_tree

router = APIRouter(prefix="/menus", tags=["menus"])


@router.get("", response_model=MenuTreeResponse)
def get_menus(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Menu tree filtered by the current user's permissions."""
    tree = get_user_menu_tree(db, current_user)
    return MenuTreeResponse(menus=[MenuTreeNode.model_validate(node) for node in tree])


@router.get("/{menu_code}/access", response_model=MenuAccessResponse)
def check_menu_access(
    menu_code: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return MenuAccessResponse(code=menu_code, accessible=can_access_menu(db, current_user, menu_code))
