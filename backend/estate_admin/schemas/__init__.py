from estate_admin.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from estate_admin.schemas.sidebar import (
    ConfigCreate, ConfigUpdate, ConfigResponse, ConfigListResponse,
    NavigationItemIn, NavigationItemOut, SidebarTreeResponse,
)
from estate_admin.schemas.permission import (
    PermissionCatalogResponse, PermissionsCreate, PermissionsUpdate, UserPermissionsResponse,
)

__all__ = [
    "CurrentUser", "LoginRequest", "TokenResponse",
    "ConfigCreate", "ConfigUpdate", "ConfigResponse", "ConfigListResponse",
    "NavigationItemIn", "NavigationItemOut", "SidebarTreeResponse",
    "PermissionCatalogResponse", "PermissionsCreate", "PermissionsUpdate", "UserPermissionsResponse",
]
