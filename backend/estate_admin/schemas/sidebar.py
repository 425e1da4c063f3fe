"""Sidebar configuration schemas.

Write-time validation lives here: an item without id/title/path, an empty or
non-admin-area role list, duplicate ids and dangling parent references never
reach the store.
"""

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from estate_admin.access.navigation import ConfigScope, normalize_parent_id
from estate_admin.access.roles import ADMIN_AREA_ROLES, Role


def _admin_area_role(role: Role) -> Role:
    if role not in ADMIN_AREA_ROLES:
        raise ValueError(f"role must be one of: {', '.join(sorted(r.value for r in ADMIN_AREA_ROLES))}")
    return role


def _clean_tokens(tokens: list[str]) -> list[str]:
    cleaned: list[str] = []
    for token in tokens:
        token = token.strip()
        if token and token not in cleaned:
            cleaned.append(token)
    return cleaned


def _allowed_roles(roles: list[Role]) -> list[Role]:
    if not roles:
        raise ValueError("allowed_roles needs at least one role")
    unique: list[Role] = []
    for role in roles:
        _admin_area_role(role)
        if role not in unique:
            unique.append(role)
    return unique


AdminAreaRole = Annotated[Role, AfterValidator(_admin_area_role)]
ParentId = Annotated[str | None, BeforeValidator(normalize_parent_id)]
AllowedRoles = Annotated[list[Role], AfterValidator(_allowed_roles)]
PermissionTokens = Annotated[list[str], AfterValidator(_clean_tokens)]


# ── Items ──────────────────────────────────────────
class NavigationItemIn(BaseModel):
    id: str = Field(..., min_length=1, max_length=100, pattern=r"^[A-Za-z0-9_.-]+$")
    title: str = Field(..., min_length=1, max_length=255)
    path: str = Field(..., min_length=1, max_length=500)
    parent_id: ParentId = None
    order: int | None = None
    is_visible: bool = True
    allowed_roles: AllowedRoles
    required_permissions: PermissionTokens = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _not_own_parent(self):
        if self.parent_id == self.id:
            raise ValueError(f"item {self.id!r} cannot be its own parent")
        return self


def validate_item_tree(items: list[NavigationItemIn]) -> list[NavigationItemIn]:
    """Unique ids, existing acyclic parents; missing orders follow list position."""
    ids = [item.id for item in items]
    duplicates = sorted({item_id for item_id in ids if ids.count(item_id) > 1})
    if duplicates:
        raise ValueError(f"duplicate item ids: {', '.join(duplicates)}")

    parents = {item.id: item.parent_id for item in items}
    for item in items:
        if item.parent_id is not None and item.parent_id not in parents:
            raise ValueError(f"item {item.id!r} references unknown parent {item.parent_id!r}")

        seen = {item.id}
        parent = item.parent_id
        while parent is not None:
            if parent in seen:
                raise ValueError(f"item {item.id!r} is part of a parent cycle")
            seen.add(parent)
            parent = parents.get(parent)

    for index, item in enumerate(items):
        if item.order is None:
            item.order = index + 1
    return items


ItemTree = Annotated[list[NavigationItemIn], AfterValidator(validate_item_tree)]


class NavigationItemOut(BaseModel):
    id: str
    title: str
    path: str
    parent_id: str | None = None
    order: int = 0
    is_visible: bool = True
    allowed_roles: list[str] = Field(default_factory=list)
    required_permissions: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class SidebarNode(NavigationItemOut):
    is_group: bool = False
    children: list["SidebarNode"] = Field(default_factory=list)


# ── Configurations ─────────────────────────────────
class ConfigCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    role: AdminAreaRole
    items: ItemTree
    is_default: bool = False


class ConfigUpdate(BaseModel):
    version: int = Field(..., ge=1)
    name: str | None = Field(None, min_length=1, max_length=255)
    items: ItemTree | None = None
    is_default: bool | None = None


class ConfigResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    role: Role
    scope: ConfigScope
    is_default: bool
    user_id: UUID | None = None
    version: int
    items: list[NavigationItemOut]
    created_at: datetime
    updated_at: datetime


class ConfigListResponse(BaseModel):
    items: list[ConfigResponse]
    total: int


class VersionedRequest(BaseModel):
    version: int = Field(..., ge=1)


class ItemOrder(BaseModel):
    id: str = Field(..., min_length=1)
    order: int


class ReorderRequest(VersionedRequest):
    item_orders: list[ItemOrder]


class AddItemRequest(VersionedRequest):
    item: NavigationItemIn


class ItemPatch(VersionedRequest):
    title: str | None = Field(None, min_length=1, max_length=255)
    path: str | None = Field(None, min_length=1, max_length=500)
    # Sent as null or "" to move the item to the top level.
    parent_id: ParentId = None
    order: int | None = None
    is_visible: bool | None = None
    allowed_roles: AllowedRoles | None = None
    required_permissions: PermissionTokens | None = None
    metadata: dict[str, Any] | None = None

    def changes(self) -> dict[str, Any]:
        changes = self.model_dump(exclude_unset=True, exclude={"version"}, mode="json")
        return {
            field: value
            for field, value in changes.items()
            if value is not None or field == "parent_id"
        }


class ResetRequest(BaseModel):
    role: AdminAreaRole


# ── Per-user overrides ─────────────────────────────
class UserOverrideUpdate(BaseModel):
    # Required once the override exists; omitted on first creation.
    version: int | None = Field(None, ge=1)
    items: ItemTree


# ── Resolved sidebar ───────────────────────────────
class SidebarTreeResponse(BaseModel):
    config_id: UUID
    config_name: str
    scope: ConfigScope
    role: Role
    version: int
    items: list[SidebarNode]
