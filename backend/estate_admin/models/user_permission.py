"""Per-user permission grants."""

import uuid

from sqlalchemy import ForeignKey
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from estate_admin.db.base import Base
from estate_admin.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class UserPermission(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "user_permissions"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"),
        unique=True, nullable=False, index=True,
    )
    # Flat list of capability tokens, e.g. ["view_users", "edit_settings"]
    permissions: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)

    user = relationship("User", back_populates="permission")

    def __repr__(self) -> str:
        return f"<UserPermission user={self.user_id} tokens={len(self.permissions or [])}>"
