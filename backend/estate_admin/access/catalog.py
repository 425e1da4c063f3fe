"""Catalog of capability tokens granted to employees.

Employee grants are split in two:

┌──────────────────────┬───────────────────────────────────────────────┐
│ Default              │ Always granted, cannot be revoked per user    │
│ Manageable           │ Toggled per employee by an administrator      │
└──────────────────────┴───────────────────────────────────────────────┘

Admins are never provisioned; they bypass every permission check.
"""

PERMISSION_GROUPS: dict[str, list[str]] = {
    "users": [
        "view_users",
        "create_user",
        "edit_user",
        "delete_user",
        "change_user_role",
        "change_user_status",
        "reset_user_password",
        "approve_user",
        "manage_permissions",
    ],
    "posts": [
        "view_posts",
        "create_post",
        "edit_post",
        "delete_post",
        "approve_post",
        "reject_post",
        "feature_post",
        "view_deleted_posts",
        "restore_post",
    ],
    "projects": [
        "view_projects",
        "create_project",
        "edit_project",
        "delete_project",
    ],
    "news": [
        "view_news",
        "create_news",
        "edit_news",
        "delete_news",
        "feature_news",
        "publish_news",
        "manage_news_categories",
    ],
    "transactions": ["view_transactions"],
    "statistics": [
        "view_dashboard",
        "view_statistics",
        "export_statistics",
        "generate_reports",
        "view_financial_stats",
    ],
    "settings": [
        "view_settings",
        "edit_settings",
        "manage_sidebar",
        "manage_header",
        "manage_categories",
    ],
    "locations": [
        "view_locations",
        "manage_locations",
        "manage_areas",
        "manage_prices",
    ],
}

ALL_PERMISSIONS: frozenset[str] = frozenset(
    token for tokens in PERMISSION_GROUPS.values() for token in tokens
)

DEFAULT_EMPLOYEE_PERMISSIONS: list[str] = [
    "view_users",
    "view_posts",
    "create_post",
    "edit_post",
    "view_projects",
    "view_news",
    "create_news",
    "edit_news",
    "feature_news",
    "publish_news",
    "view_dashboard",
    "view_settings",
    "view_locations",
]

MANAGEABLE_EMPLOYEE_PERMISSIONS: list[str] = [
    "create_user",
    "edit_user",
    "delete_user",
    "change_user_status",
    "change_user_role",
    "delete_post",
    "approve_post",
    "reject_post",
    "feature_post",
    "create_project",
    "edit_project",
    "delete_project",
    "delete_news",
    "manage_news_categories",
    "view_transactions",
    "view_statistics",
    "export_statistics",
    "generate_reports",
    "edit_settings",
    "manage_categories",
    "manage_locations",
    "manage_areas",
    "manage_prices",
]


def merge_employee_grants(enabled: list[str]) -> list[str]:
    """Defaults first, then the enabled manageable tokens, without duplicates."""
    merged: list[str] = []
    for token in [*DEFAULT_EMPLOYEE_PERMISSIONS, *enabled]:
        if token not in merged:
            merged.append(token)
    return merged
