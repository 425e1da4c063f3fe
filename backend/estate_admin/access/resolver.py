"""Access resolver: decides which navigation items a user can see."""

from collections.abc import Iterable
from typing import Any

from estate_admin.access.navigation import NavigationItem
from estate_admin.access.permissions import PermissionSet
from estate_admin.access.roles import Role


def _sort_key(item: NavigationItem) -> tuple[int, str]:
    return (item.order, item.id)


def resolve(
    items: Iterable[NavigationItem],
    role: Role | str,
    permissions: PermissionSet,
) -> list[NavigationItem]:
    """Filter and order a configuration's items for one user.

    1. hidden items are dropped;
    2. items the role/permission gates deny are dropped;
    3. an item whose parent (at any depth) was dropped, or does not exist,
       is dropped too, so children never surface as top-level entries;
    4. survivors are sorted by (order, id).

    Never raises. An empty list is a valid answer.
    """
    by_id: dict[str, NavigationItem] = {}
    for item in items:
        by_id.setdefault(item.id, item)

    passed = {
        item_id
        for item_id, item in by_id.items()
        if item.is_visible and item.is_reachable_by(role, permissions)
    }

    memo: dict[str, bool] = {}

    def survives(item_id: str, trail: frozenset[str]) -> bool:
        if item_id in memo:
            return memo[item_id]
        item = by_id.get(item_id)
        if item is None or item_id not in passed or item_id in trail:
            result = False
        elif item.parent_id is None:
            result = True
        else:
            result = survives(item.parent_id, trail | {item_id})
        memo[item_id] = result
        return result

    kept = [item for item_id, item in by_id.items() if survives(item_id, frozenset())]
    return sorted(kept, key=_sort_key)


def build_tree(items: Iterable[NavigationItem]) -> list[dict[str, Any]]:
    """Nest a resolved item list under its parents for rendering.

    Sibling order follows the input order; children whose parent is not in
    the input are left out.
    """
    items = list(items)
    nodes: dict[str, dict[str, Any]] = {}
    for item in items:
        nodes.setdefault(item.id, {**item.to_document(), "is_group": item.is_group, "children": []})

    roots: list[dict[str, Any]] = []
    for item in items:
        node = nodes[item.id]
        if item.parent_id is None:
            roots.append(node)
        elif item.parent_id in nodes and item.parent_id != item.id:
            nodes[item.parent_id]["children"].append(node)
    return roots
