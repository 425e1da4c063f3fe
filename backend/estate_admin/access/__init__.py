"""Access resolution for the admin navigation."""

from estate_admin.access.navigation import ConfigScope, NavigationItem, items_from_documents
from estate_admin.access.permissions import PermissionSet
from estate_admin.access.resolver import build_tree, resolve
from estate_admin.access.roles import ADMIN_AREA_ROLES, Role

__all__ = [
    "ADMIN_AREA_ROLES",
    "ConfigScope",
    "NavigationItem",
    "PermissionSet",
    "Role",
    "build_tree",
    "items_from_documents",
    "resolve",
]
