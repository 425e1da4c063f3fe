"""Write path for sidebar configurations.

Every mutation of an existing configuration takes the `version` the caller
read; a stale version raises VersionConflictError instead of silently
overwriting a concurrent edit.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from estate_admin.access.navigation import NavigationItem
from estate_admin.access.roles import Role
from estate_admin.db.seed_sidebar import (
    DEFAULT_CONFIG_NAMES,
    DEFAULT_SIDEBAR_ITEMS,
    FALLBACK_SIDEBAR_ITEMS,
    fallback_config_name,
)
from estate_admin.models.sidebar_config import SidebarConfig
from estate_admin.services.errors import (
    ConfigNotFoundError,
    DuplicateItemError,
    InvalidParentError,
    ItemNotFoundError,
    LastDefaultError,
    OverrideNotDefaultableError,
    VersionConflictError,
)

logger = logging.getLogger(__name__)


def _canonical(docs: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [NavigationItem.from_document(doc).to_document() for doc in docs]


def override_name(user_id: UUID, role: Role) -> str:
    return f"user:{user_id}:{role.value}"


def check_version(config: SidebarConfig, expected: int | None) -> None:
    if expected != config.version:
        logger.warning(
            f"Version conflict on sidebar {config.id}: stored {config.version}, got {expected}"
        )
        raise VersionConflictError(expected=expected, actual=config.version)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_config(db: AsyncSession, config_id: UUID) -> SidebarConfig:
    result = await db.execute(select(SidebarConfig).where(SidebarConfig.id == config_id))
    config = result.scalar_one_or_none()
    if config is None:
        raise ConfigNotFoundError(f"Sidebar configuration {config_id} not found")
    return config


async def list_configs(db: AsyncSession, include_overrides: bool = False) -> list[SidebarConfig]:
    query = select(SidebarConfig).order_by(
        SidebarConfig.is_default.desc(), SidebarConfig.role, SidebarConfig.created_at.desc()
    )
    if not include_overrides:
        query = query.where(SidebarConfig.user_id.is_(None))
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_user_override(db: AsyncSession, user_id: UUID, role: Role) -> SidebarConfig | None:
    result = await db.execute(
        select(SidebarConfig).where(
            SidebarConfig.user_id == user_id,
            SidebarConfig.role == role,
        )
    )
    return result.scalar_one_or_none()


async def get_role_default(db: AsyncSession, role: Role) -> SidebarConfig | None:
    result = await db.execute(
        select(SidebarConfig).where(
            SidebarConfig.role == role,
            SidebarConfig.is_default.is_(True),
            SidebarConfig.user_id.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def get_by_name(db: AsyncSession, name: str) -> SidebarConfig | None:
    result = await db.execute(select(SidebarConfig).where(SidebarConfig.name == name))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Configuration writes
# ---------------------------------------------------------------------------


async def _clear_defaults(db: AsyncSession, role: Role, keep_id: UUID | None = None) -> None:
    """Unset is_default on every other default of `role`."""
    stmt = (
        update(SidebarConfig)
        .where(SidebarConfig.role == role, SidebarConfig.is_default.is_(True))
        .values(is_default=False, version=SidebarConfig.version + 1)
        .execution_options(synchronize_session="fetch")
    )
    if keep_id is not None:
        stmt = stmt.where(SidebarConfig.id != keep_id)
    await db.execute(stmt)


async def create_config(
    db: AsyncSession,
    name: str,
    role: Role,
    items: list[dict[str, Any]],
    is_default: bool = False,
    user_id: UUID | None = None,
) -> SidebarConfig:
    if is_default and user_id is None:
        await _clear_defaults(db, role)

    config = SidebarConfig(
        name=name,
        role=role,
        items=_canonical(items),
        is_default=is_default and user_id is None,
        user_id=user_id,
    )
    db.add(config)
    await db.commit()
    await db.refresh(config)
    logger.info(f"Sidebar {name!r} created for role {role.value} (default={config.is_default})")
    return config


async def update_config(
    db: AsyncSession,
    config: SidebarConfig,
    version: int | None,
    name: str | None = None,
    items: list[dict[str, Any]] | None = None,
    is_default: bool | None = None,
) -> SidebarConfig:
    check_version(config, version)

    if is_default and config.user_id is None and not config.is_default:
        await _clear_defaults(db, config.role, keep_id=config.id)
    if name is not None:
        config.name = name
    if items is not None:
        config.items = _canonical(items)
    if is_default is not None and config.user_id is None:
        config.is_default = is_default

    await db.commit()
    await db.refresh(config)
    return config


async def set_default(db: AsyncSession, config: SidebarConfig) -> SidebarConfig:
    """Make `config` the one default of its role."""
    if config.user_id is not None:
        raise OverrideNotDefaultableError("Per-user overrides cannot be made a role default")
    await _clear_defaults(db, config.role, keep_id=config.id)
    config.is_default = True
    await db.commit()
    await db.refresh(config)
    logger.info(f"Sidebar {config.name!r} is now the default for role {config.role.value}")
    return config


async def delete_config(db: AsyncSession, config: SidebarConfig) -> None:
    if config.is_default:
        raise LastDefaultError(
            f"Cannot delete the default sidebar of role {config.role.value}; set another default first"
        )
    await db.delete(config)
    await db.commit()
    logger.info(f"Sidebar {config.name!r} deleted")


async def reset_role_default(db: AsyncSession, role: Role) -> SidebarConfig:
    """Drop the role's defaults and reseed them from the shipped item list."""
    name = DEFAULT_CONFIG_NAMES[role]
    await db.execute(
        delete(SidebarConfig).where(
            SidebarConfig.user_id.is_(None),
            or_(
                and_(SidebarConfig.role == role, SidebarConfig.is_default.is_(True)),
                SidebarConfig.name == name,
            ),
        )
    )
    logger.info(f"Sidebar default for role {role.value} reset")
    return await create_config(db, name, role, DEFAULT_SIDEBAR_ITEMS, is_default=True)


async def create_fallback_default(db: AsyncSession, role: Role) -> SidebarConfig:
    """Persist the built-in minimal sidebar as the default of `role`.

    A leftover non-default config carrying the built-in name is promoted
    instead of inserting a second one.
    """
    name = fallback_config_name(role)
    existing = await get_by_name(db, name)
    if existing is not None and existing.user_id is None and existing.role == role:
        return await set_default(db, existing)
    return await create_config(db, name, role, FALLBACK_SIDEBAR_ITEMS, is_default=True)


# ---------------------------------------------------------------------------
# Item writes
# ---------------------------------------------------------------------------


def _find(items: list[dict[str, Any]], item_id: str) -> int:
    for index, item in enumerate(items):
        if item.get("id") == item_id:
            return index
    raise ItemNotFoundError(f"Menu item {item_id!r} not found")


def _check_parent(items: list[dict[str, Any]], item_id: str, parent_id: str | None) -> None:
    """`parent_id` must exist and must not sit below `item_id`."""
    if parent_id is None:
        return
    _find(items, parent_id)
    parents = {item.get("id"): item.get("parent_id") for item in items}
    ancestor = parent_id
    seen = set()
    while ancestor is not None and ancestor not in seen:
        if ancestor == item_id:
            raise InvalidParentError(f"Menu item {item_id!r} cannot be moved under {parent_id!r}")
        seen.add(ancestor)
        ancestor = parents.get(ancestor) or None


def _sorted(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(items, key=lambda item: (item.get("order", 0), item.get("id", "")))


async def _save_items(db: AsyncSession, config: SidebarConfig, items: list[dict[str, Any]]) -> SidebarConfig:
    # Reassign so the JSONB column is flagged dirty.
    config.items = _canonical(items)
    await db.commit()
    await db.refresh(config)
    return config


async def add_item(
    db: AsyncSession, config: SidebarConfig, version: int, item: dict[str, Any]
) -> SidebarConfig:
    check_version(config, version)
    items = list(config.items or [])
    if any(existing.get("id") == item["id"] for existing in items):
        raise DuplicateItemError(f"Menu item {item['id']!r} already exists")
    parent_id = item.get("parent_id")
    if parent_id:
        _find(items, parent_id)
    if item.get("order") is None:
        item = {**item, "order": len(items) + 1}
    items.append(item)
    return await _save_items(db, config, _sorted(items))


async def update_item(
    db: AsyncSession,
    config: SidebarConfig,
    version: int,
    item_id: str,
    changes: dict[str, Any],
) -> SidebarConfig:
    check_version(config, version)
    items = [dict(item) for item in config.items or []]
    index = _find(items, item_id)
    if "parent_id" in changes:
        _check_parent(items, item_id, changes["parent_id"])
    items[index].update(changes)
    return await _save_items(db, config, _sorted(items))


async def remove_item(
    db: AsyncSession, config: SidebarConfig, version: int, item_id: str
) -> SidebarConfig:
    """Remove an item and, transitively, every item nested under it."""
    check_version(config, version)
    items = list(config.items or [])
    _find(items, item_id)

    doomed = {item_id}
    grew = True
    while grew:
        grew = False
        for item in items:
            if item.get("parent_id") in doomed and item.get("id") not in doomed:
                doomed.add(item["id"])
                grew = True

    remaining = [item for item in items if item.get("id") not in doomed]
    return await _save_items(db, config, remaining)


async def reorder_items(
    db: AsyncSession, config: SidebarConfig, version: int, orders: dict[str, int]
) -> SidebarConfig:
    check_version(config, version)
    items = [
        {**item, "order": orders[item["id"]]} if item.get("id") in orders else dict(item)
        for item in config.items or []
    ]
    return await _save_items(db, config, _sorted(items))


# ---------------------------------------------------------------------------
# Per-user overrides
# ---------------------------------------------------------------------------


async def save_user_override(
    db: AsyncSession,
    user_id: UUID,
    role: Role,
    items: list[dict[str, Any]],
    version: int | None = None,
) -> SidebarConfig:
    """Create the user's override on first edit, otherwise replace its items."""
    override = await get_user_override(db, user_id, role)
    if override is None:
        config = await create_config(db, override_name(user_id, role), role, items, user_id=user_id)
        logger.info(f"Sidebar override created for user {user_id} ({role.value})")
        return config
    return await update_config(db, override, version=version, items=items)


async def delete_user_override(db: AsyncSession, user_id: UUID, role: Role) -> None:
    """Reset a user back to the role default."""
    override = await get_user_override(db, user_id, role)
    if override is None:
        raise ConfigNotFoundError(f"User {user_id} has no sidebar override")
    await db.delete(override)
    await db.commit()
    logger.info(f"Sidebar override for user {user_id} ({role.value}) reset")
