"""Seed data for the admin sidebar.

Sidebar tree seeded at deployment (same items for every role; each item's
allow-list and required permissions decide who sees it):

┌──────────────────┬─────────────────────┬──────────────────┬──────────────────────────────┐
│ Group            │ Item                │ Roles            │ Requires any of              │
├──────────────────┼─────────────────────┼──────────────────┼──────────────────────────────┤
│ main-group       │ dashboard           │ admin, employee  │ view_dashboard               │
│                  │ statistics          │ admin, employee  │ view_statistics              │
│ content-group    │ posts               │ admin, employee  │ view_posts                   │
│                  │ news                │ admin, employee  │ view_news                    │
│                  │ projects            │ admin, employee  │ view_projects                │
│                  │ categories          │ admin, employee  │ manage_categories            │
│ users-group      │ all-users           │ admin            │ view_users                   │
│                  │ employees           │ admin            │ view_users, manage_perm...   │
│ locations-group  │ locations           │ admin, employee  │ view_locations               │
│                  │ prices              │ admin, employee  │ manage_prices                │
│ system-group     │ general-settings    │ admin            │ edit_settings                │
│                  │ sidebar-config      │ admin            │ manage_sidebar               │
└──────────────────┴─────────────────────┴──────────────────┴──────────────────────────────┘
"""

from typing import Any

from estate_admin.access.roles import Role


def _item(
    id: str,
    title: str,
    path: str,
    order: int,
    roles: list[str],
    permissions: list[str] | None = None,
    parent_id: str | None = None,
    icon: str | None = None,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {}
    if icon:
        metadata["icon"] = icon
    if path == "#":
        metadata["isGroup"] = True
    return {
        "id": id,
        "title": title,
        "path": path,
        "parent_id": parent_id,
        "order": order,
        "is_visible": True,
        "allowed_roles": roles,
        "required_permissions": permissions or [],
        "metadata": metadata,
    }


BOTH = ["admin", "employee"]
ADMIN_ONLY = ["admin"]

DEFAULT_SIDEBAR_ITEMS: list[dict[str, Any]] = [
    # Main
    _item("main-group", "Overview", "#", 1, BOTH, icon="HomeIcon"),
    _item("dashboard", "Dashboard", "/admin", 1, BOTH, ["view_dashboard"], "main-group", "ChartBarIcon"),
    _item("statistics", "Statistics", "/admin/statistics", 2, BOTH, ["view_statistics"], "main-group",
          "PresentationChartLineIcon"),
    # Content
    _item("content-group", "Content", "#", 2, BOTH, icon="DocumentTextIcon"),
    _item("posts", "Listings", "/admin/posts", 1, BOTH, ["view_posts"], "content-group", "HomeIcon"),
    _item("news", "News", "/admin/news", 2, BOTH, ["view_news"], "content-group", "NewspaperIcon"),
    _item("projects", "Projects", "/admin/projects", 3, BOTH, ["view_projects"], "content-group",
          "BuildingOfficeIcon"),
    _item("categories", "Categories", "/admin/categories", 4, BOTH, ["manage_categories"], "content-group",
          "TagIcon"),
    # Users
    _item("users-group", "Users", "#", 3, ADMIN_ONLY, icon="UsersIcon"),
    _item("all-users", "All users", "/admin/users", 1, ADMIN_ONLY, ["view_users"], "users-group",
          "UserGroupIcon"),
    _item("employees", "Employees", "/admin/employee-permissions", 2, ADMIN_ONLY,
          ["view_users", "manage_permissions"], "users-group", "UserIcon"),
    # Locations and pricing
    _item("locations-group", "Locations", "#", 4, BOTH, icon="MapIcon"),
    _item("locations", "Locations", "/admin/locations", 1, BOTH, ["view_locations"], "locations-group",
          "MapPinIcon"),
    _item("prices", "Price ranges", "/admin/prices", 2, BOTH, ["manage_prices"], "locations-group",
          "CurrencyDollarIcon"),
    # System
    _item("system-group", "System", "#", 5, ADMIN_ONLY, icon="CogIcon"),
    _item("general-settings", "Settings", "/admin/settings", 1, ADMIN_ONLY, ["edit_settings"], "system-group",
          "AdjustmentsHorizontalIcon"),
    _item("sidebar-config", "Sidebar", "/admin/sidebar-config", 2, ADMIN_ONLY, ["manage_sidebar"],
          "system-group", "Bars3Icon"),
]

DEFAULT_CONFIG_NAMES: dict[Role, str] = {
    Role.ADMIN: "Admin Sidebar",
    Role.EMPLOYEE: "Employee Sidebar",
}

# Used when a role has neither an override nor a default, so a misconfigured
# deployment still renders a usable menu.
FALLBACK_SIDEBAR_ITEMS: list[dict[str, Any]] = [
    _item("dashboard", "Dashboard", "/admin", 0, BOTH),
    _item("users", "Users", "/admin/users", 1, ADMIN_ONLY),
    _item("projects", "Projects", "/admin/projects", 2, BOTH, ["view_projects"]),
    _item("posts", "Listings", "/admin/posts", 3, BOTH, ["view_posts"]),
    _item("settings", "Settings", "/admin/settings", 4, ADMIN_ONLY),
]


def fallback_config_name(role: Role) -> str:
    return f"Built-in {role.value} sidebar"
