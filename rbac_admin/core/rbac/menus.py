"""Menu access filtering and tree construction.

All functions here operate on immutable ``MenuRecord`` snapshots taken
from the database and return derived views; nothing is persisted.

Pipeline for a request:
    records (visible, ordered by order/created_at)
      -> filter_accessible_menus(records, user_permissions)
      -> build_menu_tree(filtered)
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from .checker import has_any


@dataclass(frozen=True)
class MenuRecord:
    """Snapshot of a menu row with the codes of its required permissions."""
    id: Any
    code: str
    name: str
    path: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Any = None
    order: int = 0
    is_visible: bool = True
    required_permissions: tuple[str, ...] = ()


@dataclass
class MenuNode:
    """A menu placed in the navigation tree."""
    id: Any
    code: str
    name: str
    path: Optional[str]
    icon: Optional[str]
    parent_id: Any
    order: int
    is_visible: bool
    children: list["MenuNode"] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: MenuRecord) -> "MenuNode":
        return cls(
            id=record.id,
            code=record.code,
            name=record.name,
            path=record.path,
            icon=record.icon,
            parent_id=record.parent_id,
            order=record.order,
            is_visible=record.is_visible,
        )


def is_menu_accessible(menu: MenuRecord, user_permissions: Iterable[str]) -> bool:
    """A menu with no required permissions is public; otherwise any one suffices."""
    if not menu.required_permissions:
        return True
    return has_any(user_permissions, menu.required_permissions)


def filter_accessible_menus(
    menus: Iterable[MenuRecord], user_permissions: Iterable[str]
) -> list[MenuRecord]:
    """Menus the user may see, in their original relative order.

    Each menu is judged on its own requirements; a hidden parent does not
    hide its children here (see ``build_menu_tree``).
    """
    permissions = set(user_permissions or ())
    return [menu for menu in menus or () if is_menu_accessible(menu, permissions)]


def build_menu_tree(menus: Iterable[MenuRecord]) -> list[MenuNode]:
    """
    Convert a flat, pre-sorted menu list into an ordered forest.

    Nodes keep the relative order of the input at every level. A menu whose
    parent is not in the input (filtered out or missing) is promoted to a
    root rather than dropped. Each node is placed exactly once, so the
    single pass terminates even on cyclic parent data.
    """
    menus = list(menus or ())
    nodes: dict[Any, MenuNode] = {menu.id: MenuNode.from_record(menu) for menu in menus}
    roots: list[MenuNode] = []

    for menu in menus:
        node = nodes[menu.id]
        parent = nodes.get(menu.parent_id) if menu.parent_id is not None else None
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)

    return roots


def iter_tree(tree: Iterable[MenuNode]):
    """Yield every node of a forest, depth-first in display order."""
    stack = list(reversed(list(tree)))
    seen: set[int] = set()
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        stack.extend(reversed(node.children))


def find_menu(tree: Iterable[MenuNode], code: str) -> Optional[MenuNode]:
    """Find the node with ``code`` anywhere in the forest."""
    for node in iter_tree(tree):
        if node.code == code:
            return node
    return None


def menu_in_tree(tree: Iterable[MenuNode], code: str) -> bool:
    return find_menu(tree, code) is not None


def count_nodes(tree: Iterable[MenuNode]) -> int:
    return sum(1 for _ in iter_tree(tree))


def would_create_cycle(menu_id: Any, new_parent_id: Any, parent_of: Mapping[Any, Any]) -> bool:
    """
    Check whether re-parenting ``menu_id`` under ``new_parent_id`` makes a loop.

    Walks the ancestor chain of the proposed parent using ``parent_of``
    (menu id -> parent id). The walk is bounded by a visited set, so an
    ancestor chain that already loops is reported as a cycle instead of
    spinning forever.
    """
    visited = set()
    current = new_parent_id
    while current is not None:
        if current == menu_id or current in visited:
            return True
        visited.add(current)
        current = parent_of.get(current)
    return False
