"""Navigation items: one entry (leaf or group) of the admin sidebar."""

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from estate_admin.access.permissions import PermissionSet, normalize_tokens
from estate_admin.access.roles import ADMIN_AREA_ROLES, Role, parse_role

GROUP_PATH = "#"


class ConfigScope(str, enum.Enum):
    DEFAULT = "default"
    USER = "user"


def normalize_parent_id(value: object) -> str | None:
    """Collapse every "no parent" spelling (None, "", whitespace) to None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _as_int(value: object, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class NavigationItem:
    id: str
    title: str
    path: str
    parent_id: str | None = None
    order: int = 0
    is_visible: bool = True
    allowed_roles: frozenset[Role] = field(default_factory=lambda: frozenset({Role.ADMIN}))
    required_permissions: frozenset[str] = field(default_factory=frozenset)
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "NavigationItem":
        """Build an item from its stored JSON form.

        Reading is lenient: role tokens outside the admin area are dropped so
        they can never match, and malformed permission lists grant nothing.
        """
        roles = doc.get("allowed_roles") or []
        allowed = frozenset(
            role for role in (parse_role(r) for r in roles) if role in ADMIN_AREA_ROLES
        )
        metadata = doc.get("metadata")
        return cls(
            id=str(doc["id"]),
            title=str(doc.get("title") or ""),
            path=str(doc.get("path") or ""),
            parent_id=normalize_parent_id(doc.get("parent_id")),
            order=_as_int(doc.get("order")),
            is_visible=bool(doc.get("is_visible", True)),
            allowed_roles=allowed,
            required_permissions=normalize_tokens(doc.get("required_permissions")),
            metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "path": self.path,
            "parent_id": self.parent_id,
            "order": self.order,
            "is_visible": self.is_visible,
            "allowed_roles": sorted(role.value for role in self.allowed_roles),
            "required_permissions": sorted(self.required_permissions),
            "metadata": dict(self.metadata),
        }

    @property
    def is_group(self) -> bool:
        return self.path in ("", GROUP_PATH) or bool(self.metadata.get("isGroup"))

    @property
    def effective_roles(self) -> frozenset[Role]:
        # An empty allow-list means admin-only.
        return self.allowed_roles or frozenset({Role.ADMIN})

    def is_reachable_by(self, role: Role | str, permissions: PermissionSet) -> bool:
        """Role gate first, then the permission gate.

        Permissions can never widen what the role gate denies, and admins skip
        the permission gate entirely.
        """
        role = parse_role(role)
        if role is None or role not in self.effective_roles:
            return False
        if role is Role.ADMIN or not self.required_permissions:
            return True
        return permissions.has_any(self.required_permissions)


def items_from_documents(docs: object) -> list[NavigationItem]:
    """Parse a stored item list, skipping entries without an id."""
    if not isinstance(docs, list):
        return []
    return [
        NavigationItem.from_document(doc)
        for doc in docs
        if isinstance(doc, Mapping) and doc.get("id")
    ]
