"""Auth request/response schemas."""

from uuid import UUID

from pydantic import BaseModel, Field

from estate_admin.access.permissions import PermissionSet
from estate_admin.access.roles import Role


# ── Login ──────────────────────────────────────────
class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: UUID
    role: Role


# ── Current User ───────────────────────────────────
class CurrentUser(BaseModel):
    id: UUID
    username: str
    email: str
    full_name: str | None = None
    role: Role
    permissions: list[str]
    is_active: bool

    @property
    def permission_set(self) -> PermissionSet:
        return PermissionSet.for_user(self.role, self.permissions)
