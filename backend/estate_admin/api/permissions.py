"""Permission management endpoints: catalog, per-user grants, employee toggles."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from estate_admin.access.catalog import (
    DEFAULT_EMPLOYEE_PERMISSIONS,
    MANAGEABLE_EMPLOYEE_PERMISSIONS,
    PERMISSION_GROUPS,
)
from estate_admin.access.roles import Role
from estate_admin.core.deps import (
    get_current_user,
    require_admin,
    require_all_permissions,
    require_permission,
)
from estate_admin.db.base import get_db
from estate_admin.schemas.auth import CurrentUser
from estate_admin.schemas.permission import (
    EmployeePermissionsResponse,
    EmployeesResponse,
    EmployeeWithPermissions,
    PermissionCatalogResponse,
    PermissionsCreate,
    PermissionsUpdate,
    UserPermissionsResponse,
    UsersWithPermissionsResponse,
    UserWithPermissions,
)
from estate_admin.services import permission_store
from estate_admin.services.errors import (
    NotAnEmployeeError,
    PermissionNotAllowedError,
    PermissionRecordExistsError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/permissions", tags=["permissions"])


async def _user_or_404(db: AsyncSession, user_id: UUID):
    try:
        return await permission_store.get_user(db, user_id)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/available", response_model=PermissionCatalogResponse)
async def available_permissions(
    current_user: CurrentUser = Depends(require_permission("view_settings")),
):
    """Every token grouped by area, plus the employee default/manageable split."""
    return PermissionCatalogResponse(
        permission_groups=PERMISSION_GROUPS,
        manageable_employee_permissions=MANAGEABLE_EMPLOYEE_PERMISSIONS,
        default_employee_permissions=DEFAULT_EMPLOYEE_PERMISSIONS,
    )


@router.get("/users", response_model=UsersWithPermissionsResponse)
async def list_users_with_permissions(
    current_user: CurrentUser = Depends(require_permission("view_users")),
    db: AsyncSession = Depends(get_db),
):
    rows = await permission_store.list_users_with_permissions(db)
    return UsersWithPermissionsResponse(
        users=[
            UserWithPermissions(
                id=user.id,
                username=user.username,
                email=user.email,
                role=user.role,
                is_active=user.is_active,
                created_at=user.created_at,
                permissions=tokens or [],
            )
            for user, tokens in rows
        ]
    )


@router.get("/user/{user_id}", response_model=UserPermissionsResponse)
async def get_user_permissions(
    user_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Effective tokens of a user. Admins may read anyone, others only themselves."""
    if current_user.role is not Role.ADMIN and current_user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to read another user's permissions",
        )

    user = await _user_or_404(db, user_id)
    permissions = await permission_store.load_permission_set(db, user.id, user.role)
    return UserPermissionsResponse(
        user_id=user.id, username=user.username, permissions=permissions.as_list()
    )


@router.put("/user/{user_id}", response_model=UserPermissionsResponse)
async def update_user_permissions(
    user_id: UUID,
    body: PermissionsUpdate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await _user_or_404(db, user_id)
    try:
        record = await permission_store.set_permissions(db, user.id, body.permissions)
    except PermissionNotAllowedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return UserPermissionsResponse(
        user_id=user.id, username=user.username, permissions=list(record.permissions)
    )


@router.post(
    "/user",
    response_model=UserPermissionsResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_user_permissions(
    body: PermissionsCreate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await _user_or_404(db, body.user_id)
    try:
        record = await permission_store.create_permissions(db, user.id, body.permissions)
    except PermissionRecordExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except PermissionNotAllowedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return UserPermissionsResponse(
        user_id=user.id, username=user.username, permissions=list(record.permissions)
    )


@router.delete("/user/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_permissions(
    user_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        await permission_store.delete_permissions(db, user_id)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/employees", response_model=EmployeesResponse)
async def list_employees(
    current_user: CurrentUser = Depends(require_permission("view_users")),
    db: AsyncSession = Depends(get_db),
):
    """Employees with their grants.

    Never-provisioned employees list the defaults they would receive, flagged
    `provisioned=False`: until a record exists they hold no tokens.
    """
    rows = await permission_store.list_users_with_permissions(db, role=Role.EMPLOYEE)
    employees = []
    for user, tokens in rows:
        provisioned = tokens is not None
        tokens = tokens if provisioned else list(DEFAULT_EMPLOYEE_PERMISSIONS)
        employees.append(
            EmployeeWithPermissions(
                id=user.id,
                username=user.username,
                email=user.email,
                role=user.role,
                is_active=user.is_active,
                created_at=user.created_at,
                permissions=tokens,
                enabled_permissions=[t for t in tokens if t in MANAGEABLE_EMPLOYEE_PERMISSIONS],
                provisioned=provisioned,
            )
        )
    return EmployeesResponse(
        employees=employees,
        manageable_permissions=MANAGEABLE_EMPLOYEE_PERMISSIONS,
        default_permissions=DEFAULT_EMPLOYEE_PERMISSIONS,
    )


@router.put("/employee/{user_id}", response_model=EmployeePermissionsResponse)
async def update_employee_permissions(
    user_id: UUID,
    body: PermissionsUpdate,
    current_user: CurrentUser = Depends(require_all_permissions("view_users", "change_user_role")),
    db: AsyncSession = Depends(get_db),
):
    """Toggle manageable tokens for an employee; defaults are always kept."""
    if current_user.id == user_id and current_user.role is not Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Employees cannot change their own permissions",
        )

    user = await _user_or_404(db, user_id)
    try:
        final = await permission_store.update_employee_permissions(db, user, body.permissions)
    except (NotAnEmployeeError, PermissionNotAllowedError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    logger.info(f"User {current_user.id} updated employee {user_id} permissions")
    return EmployeePermissionsResponse(
        user_id=user.id,
        permissions=final,
        added_permissions=[t for t in final if t not in DEFAULT_EMPLOYEE_PERMISSIONS],
    )
