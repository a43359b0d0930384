"""Services for RBAC Admin."""

from rbac_admin.services.menus import (
    MenuValidationError,
    can_access_menu,
    get_user_menu_tree,
    load_menu_records,
    validate_parent,
)
from rbac_admin.services.analytics import monthly_trends, region_sales, top_products

__all__ = [
    "MenuValidationError",
    "can_access_menu",
    "get_user_menu_tree",
    "load_menu_records",
    "validate_parent",
    "monthly_trends",
    "region_sales",
    "top_products",
]
