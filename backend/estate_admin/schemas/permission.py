"""Permission management schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from estate_admin.access.roles import Role


class PermissionCatalogResponse(BaseModel):
    permission_groups: dict[str, list[str]]
    manageable_employee_permissions: list[str]
    default_employee_permissions: list[str]


class UserPermissionsResponse(BaseModel):
    user_id: UUID
    username: str
    permissions: list[str]


class PermissionsUpdate(BaseModel):
    permissions: list[str]


class PermissionsCreate(PermissionsUpdate):
    user_id: UUID


class UserWithPermissions(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    role: Role
    is_active: bool
    created_at: datetime
    permissions: list[str] = Field(default_factory=list)


class UsersWithPermissionsResponse(BaseModel):
    users: list[UserWithPermissions]


class EmployeeWithPermissions(UserWithPermissions):
    enabled_permissions: list[str] = Field(default_factory=list)
    # False until a permission record exists; such employees hold no tokens yet.
    provisioned: bool = True


class EmployeesResponse(BaseModel):
    employees: list[EmployeeWithPermissions]
    manageable_permissions: list[str]
    default_permissions: list[str]


class EmployeePermissionsResponse(BaseModel):
    user_id: UUID
    permissions: list[str]
    added_permissions: list[str]
