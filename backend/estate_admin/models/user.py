"""User model."""

from sqlalchemy import String, Boolean, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from estate_admin.access.roles import Role
from estate_admin.db.base import Base
from estate_admin.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin


def role_enum() -> Enum:
    """Role column type storing the lowercase token ("admin"), not the member name."""
    return Enum(
        Role,
        name="user_role",
        native_enum=False,
        length=20,
        values_callable=lambda roles: [r.value for r in roles],
    )


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255))
    role: Mapped[Role] = mapped_column(role_enum(), default=Role.USER, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    permission = relationship(
        "UserPermission", back_populates="user", uselist=False, lazy="selectin"
    )
    sidebar_overrides = relationship(
        "SidebarConfig", back_populates="user", cascade="all, delete-orphan", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role.value})>"
