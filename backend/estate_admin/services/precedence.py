"""Picks which sidebar configuration applies to a user.

Precedence, most specific first:

1. the user's own override for the role;
2. the role's default configuration;
3. the built-in fallback, persisted as the role default on first use so the
   next call reads it back instead of synthesizing again.

Nothing is cached between calls; every resolution reads the store.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from estate_admin.access.navigation import NavigationItem
from estate_admin.access.permissions import PermissionSet
from estate_admin.access.resolver import resolve
from estate_admin.access.roles import ADMIN_AREA_ROLES, Role, parse_role
from estate_admin.models.sidebar_config import SidebarConfig
from estate_admin.services import permission_store, sidebar_store

logger = logging.getLogger(__name__)


def _admin_area_role(role: Role | str) -> Role:
    parsed = parse_role(role)
    if parsed not in ADMIN_AREA_ROLES:
        raise ValueError(f"Role {role!r} has no admin navigation")
    return parsed


async def resolve_config(db: AsyncSession, user_id: UUID | None, role: Role | str) -> SidebarConfig:
    """Return the configuration that applies to `(user_id, role)`.

    `user_id=None` skips the override lookup (role-level preview).
    Store failures propagate to the caller.
    """
    role = _admin_area_role(role)

    if user_id is not None:
        override = await sidebar_store.get_user_override(db, user_id, role)
        if override is not None:
            return override

    default = await sidebar_store.get_role_default(db, role)
    if default is not None:
        return default

    logger.warning(f"No sidebar default for role {role.value}; persisting built-in fallback")
    try:
        return await sidebar_store.create_fallback_default(db, role)
    except IntegrityError:
        # A concurrent request persisted the fallback first.
        await db.rollback()
        default = await sidebar_store.get_role_default(db, role)
        if default is None:
            raise
        return default


@dataclass
class ResolvedSidebar:
    config: SidebarConfig
    role: Role
    permissions: PermissionSet
    items: list[NavigationItem]


async def resolve_sidebar(
    db: AsyncSession,
    user_id: UUID,
    role: Role | str,
    permissions: PermissionSet | None = None,
) -> ResolvedSidebar:
    """Resolve the configuration, then filter its items for the user."""
    config = await resolve_config(db, user_id, role)
    if permissions is None:
        permissions = await permission_store.load_permission_set(db, user_id, role)
    items = resolve(config.navigation_items(), config.role, permissions)
    return ResolvedSidebar(config=config, role=config.role, permissions=permissions, items=items)
