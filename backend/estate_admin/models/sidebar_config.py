"""Sidebar navigation configurations.

A configuration is either the system default for a role (`is_default`) or a
per-user override (`user_id` set). Items are stored as a JSON document list.
"""

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from estate_admin.access.navigation import ConfigScope, NavigationItem, items_from_documents
from estate_admin.access.roles import Role
from estate_admin.db.base import Base
from estate_admin.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin
from estate_admin.models.user import role_enum


class SidebarConfig(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "sidebar_configs"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_sidebar_user_role"),
        # At most one default per role.
        Index(
            "uq_sidebar_default_role",
            "role",
            unique=True,
            postgresql_where=text("is_default"),
        ),
    )

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[Role] = mapped_column(role_enum(), nullable=False, index=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    items: Mapped[list[dict]] = mapped_column(JSONB, default=list, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Set only for per-user overrides
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    user = relationship("User", back_populates="sidebar_overrides")

    __mapper_args__ = {"version_id_col": version}

    @property
    def scope(self) -> ConfigScope:
        return ConfigScope.USER if self.user_id is not None else ConfigScope.DEFAULT

    def navigation_items(self) -> list[NavigationItem]:
        return items_from_documents(self.items)

    def __repr__(self) -> str:
        return f"<SidebarConfig {self.name} role={self.role.value} v{self.version}>"
