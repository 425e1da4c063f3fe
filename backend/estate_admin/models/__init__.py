"""SQLAlchemy models for the estate admin backend."""

from estate_admin.models.user import User
from estate_admin.models.user_permission import UserPermission
from estate_admin.models.sidebar_config import SidebarConfig

__all__ = [
    "User",
    "UserPermission",
    "SidebarConfig",
]
