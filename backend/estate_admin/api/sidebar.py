"""Sidebar navigation endpoints: resolved menu + admin configuration management."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from estate_admin.access.resolver import build_tree
from estate_admin.access.roles import ADMIN_AREA_ROLES
from estate_admin.core.deps import require_admin, require_admin_area
from estate_admin.db.base import get_db
from estate_admin.models.user import User
from estate_admin.schemas.auth import CurrentUser
from estate_admin.schemas.sidebar import (
    AddItemRequest,
    ConfigCreate,
    ConfigListResponse,
    ConfigResponse,
    ConfigUpdate,
    ItemPatch,
    ReorderRequest,
    ResetRequest,
    SidebarNode,
    SidebarTreeResponse,
    UserOverrideUpdate,
)
from estate_admin.services import permission_store, sidebar_store
from estate_admin.services.errors import (
    ConfigNotFoundError,
    DuplicateItemError,
    EstateAdminError,
    InvalidParentError,
    ItemNotFoundError,
    LastDefaultError,
    OverrideNotDefaultableError,
    UserNotFoundError,
    VersionConflictError,
)
from estate_admin.services.precedence import ResolvedSidebar, resolve_config, resolve_sidebar

router = APIRouter(prefix="/sidebar", tags=["sidebar"])

_ERROR_STATUS = {
    ConfigNotFoundError: status.HTTP_404_NOT_FOUND,
    ItemNotFoundError: status.HTTP_404_NOT_FOUND,
    UserNotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateItemError: status.HTTP_409_CONFLICT,
    VersionConflictError: status.HTTP_409_CONFLICT,
    LastDefaultError: status.HTTP_400_BAD_REQUEST,
    OverrideNotDefaultableError: status.HTTP_400_BAD_REQUEST,
    InvalidParentError: status.HTTP_400_BAD_REQUEST,
}


def _http_error(exc: EstateAdminError) -> HTTPException:
    code = _ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=code, detail=str(exc))


def _tree_response(resolved: ResolvedSidebar) -> SidebarTreeResponse:
    return SidebarTreeResponse(
        config_id=resolved.config.id,
        config_name=resolved.config.name,
        scope=resolved.config.scope,
        role=resolved.role,
        version=resolved.config.version,
        items=[SidebarNode.model_validate(node) for node in build_tree(resolved.items)],
    )


async def _admin_area_user(db: AsyncSession, user_id: UUID) -> User:
    try:
        user = await permission_store.get_user(db, user_id)
    except UserNotFoundError as exc:
        raise _http_error(exc)
    if user.role not in ADMIN_AREA_ROLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Role '{user.role.value}' has no admin sidebar",
        )
    return user


async def _config_or_404(db: AsyncSession, config_id: UUID):
    try:
        return await sidebar_store.get_config(db, config_id)
    except ConfigNotFoundError as exc:
        raise _http_error(exc)


# ---------------------------------------------------------------------------
# Resolved menu
# ---------------------------------------------------------------------------


@router.get("/config", response_model=SidebarTreeResponse)
async def get_my_sidebar(
    current_user: CurrentUser = Depends(require_admin_area),
    db: AsyncSession = Depends(get_db),
):
    """Menu tree the current user is allowed to see."""
    resolved = await resolve_sidebar(
        db, current_user.id, current_user.role, current_user.permission_set
    )
    return _tree_response(resolved)


# ---------------------------------------------------------------------------
# Configuration management (admin only)
# ---------------------------------------------------------------------------


@router.get("/configs", response_model=ConfigListResponse)
async def list_configs(
    include_overrides: bool = False,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List sidebar configurations, defaults first."""
    configs = await sidebar_store.list_configs(db, include_overrides=include_overrides)
    return ConfigListResponse(
        items=[ConfigResponse.model_validate(c) for c in configs],
        total=len(configs),
    )


@router.get("/configs/{config_id}", response_model=ConfigResponse)
async def get_config(
    config_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    config = await _config_or_404(db, config_id)
    return ConfigResponse.model_validate(config)


@router.post("/configs", response_model=ConfigResponse, status_code=status.HTTP_201_CREATED)
async def create_config(
    body: ConfigCreate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a role configuration; `is_default` replaces the role's current default."""
    if await sidebar_store.get_by_name(db, body.name):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Sidebar configuration with this name already exists",
        )

    config = await sidebar_store.create_config(
        db,
        name=body.name,
        role=body.role,
        items=[item.model_dump() for item in body.items],
        is_default=body.is_default,
    )
    return ConfigResponse.model_validate(config)


@router.put("/configs/{config_id}", response_model=ConfigResponse)
async def update_config(
    config_id: UUID,
    body: ConfigUpdate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    config = await _config_or_404(db, config_id)

    if body.name and body.name != config.name:
        existing = await sidebar_store.get_by_name(db, body.name)
        if existing is not None and existing.id != config.id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Sidebar configuration with this name already exists",
            )

    try:
        config = await sidebar_store.update_config(
            db,
            config,
            version=body.version,
            name=body.name,
            items=[item.model_dump() for item in body.items] if body.items is not None else None,
            is_default=body.is_default,
        )
    except EstateAdminError as exc:
        raise _http_error(exc)
    return ConfigResponse.model_validate(config)


@router.delete("/configs/{config_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_config(
    config_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a configuration; a role's default cannot be deleted."""
    config = await _config_or_404(db, config_id)
    try:
        await sidebar_store.delete_config(db, config)
    except EstateAdminError as exc:
        raise _http_error(exc)


@router.put("/configs/{config_id}/default", response_model=ConfigResponse)
async def set_default_config(
    config_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    config = await _config_or_404(db, config_id)
    try:
        config = await sidebar_store.set_default(db, config)
    except EstateAdminError as exc:
        raise _http_error(exc)
    return ConfigResponse.model_validate(config)


@router.post("/configs/reset", response_model=ConfigResponse)
async def reset_default_config(
    body: ResetRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Replace a role's default with the shipped sidebar."""
    config = await sidebar_store.reset_role_default(db, body.role)
    return ConfigResponse.model_validate(config)


# ---------------------------------------------------------------------------
# Item management (admin only)
# ---------------------------------------------------------------------------


@router.put("/configs/{config_id}/reorder-items", response_model=ConfigResponse)
async def reorder_items(
    config_id: UUID,
    body: ReorderRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    config = await _config_or_404(db, config_id)
    try:
        config = await sidebar_store.reorder_items(
            db, config, body.version, {entry.id: entry.order for entry in body.item_orders}
        )
    except EstateAdminError as exc:
        raise _http_error(exc)
    return ConfigResponse.model_validate(config)


@router.post(
    "/configs/{config_id}/items",
    response_model=ConfigResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_item(
    config_id: UUID,
    body: AddItemRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    config = await _config_or_404(db, config_id)
    try:
        config = await sidebar_store.add_item(db, config, body.version, body.item.model_dump())
    except EstateAdminError as exc:
        raise _http_error(exc)
    return ConfigResponse.model_validate(config)


@router.patch("/configs/{config_id}/items/{item_id}", response_model=ConfigResponse)
async def update_item(
    config_id: UUID,
    item_id: str,
    body: ItemPatch,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Change visibility, roles, order, labels, parent or required permissions of one item."""
    config = await _config_or_404(db, config_id)
    try:
        config = await sidebar_store.update_item(db, config, body.version, item_id, body.changes())
    except EstateAdminError as exc:
        raise _http_error(exc)
    return ConfigResponse.model_validate(config)


@router.delete("/configs/{config_id}/items/{item_id}", response_model=ConfigResponse)
async def remove_item(
    config_id: UUID,
    item_id: str,
    version: int = Query(..., ge=1),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Remove an item together with everything nested under it."""
    config = await _config_or_404(db, config_id)
    try:
        config = await sidebar_store.remove_item(db, config, version, item_id)
    except EstateAdminError as exc:
        raise _http_error(exc)
    return ConfigResponse.model_validate(config)


# ---------------------------------------------------------------------------
# Per-user overrides (admin only)
# ---------------------------------------------------------------------------


@router.get("/users/{user_id}", response_model=ConfigResponse)
async def get_user_config(
    user_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Configuration currently in effect for a user (override or role default)."""
    user = await _admin_area_user(db, user_id)
    config = await resolve_config(db, user.id, user.role)
    return ConfigResponse.model_validate(config)


@router.put("/users/{user_id}", response_model=ConfigResponse)
async def save_user_config(
    user_id: UUID,
    body: UserOverrideUpdate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create or replace the user's own sidebar override."""
    user = await _admin_area_user(db, user_id)
    try:
        config = await sidebar_store.save_user_override(
            db,
            user.id,
            user.role,
            [item.model_dump() for item in body.items],
            version=body.version,
        )
    except EstateAdminError as exc:
        raise _http_error(exc)
    return ConfigResponse.model_validate(config)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def reset_user_config(
    user_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Drop the user's override; they fall back to the role default."""
    user = await _admin_area_user(db, user_id)
    try:
        await sidebar_store.delete_user_override(db, user.id, user.role)
    except EstateAdminError as exc:
        raise _http_error(exc)


@router.get("/users/{user_id}/preview", response_model=SidebarTreeResponse)
async def preview_user_sidebar(
    user_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Menu tree exactly as the given user would receive it."""
    user = await _admin_area_user(db, user_id)
    resolved = await resolve_sidebar(db, user.id, user.role)
    return _tree_response(resolved)
