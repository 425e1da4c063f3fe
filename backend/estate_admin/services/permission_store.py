"""Reads and writes of per-user permission grants."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from estate_admin.access.catalog import (
    ALL_PERMISSIONS,
    MANAGEABLE_EMPLOYEE_PERMISSIONS,
    merge_employee_grants,
)
from estate_admin.access.permissions import PermissionSet
from estate_admin.access.roles import Role
from estate_admin.models.user import User
from estate_admin.models.user_permission import UserPermission
from estate_admin.services.errors import (
    NotAnEmployeeError,
    PermissionNotAllowedError,
    PermissionRecordExistsError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


def _dedupe(tokens: list[str]) -> list[str]:
    seen: list[str] = []
    for token in tokens:
        token = token.strip()
        if token and token not in seen:
            seen.append(token)
    return seen


def _known_tokens(tokens: list[str]) -> list[str]:
    """De-duplicate and reject tokens that are not in the catalog."""
    tokens = _dedupe(tokens)
    unknown = [token for token in tokens if token not in ALL_PERMISSIONS]
    if unknown:
        raise PermissionNotAllowedError(unknown)
    return tokens


async def get_user(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFoundError(f"User {user_id} not found")
    return user


async def get_permission_record(db: AsyncSession, user_id: UUID) -> UserPermission | None:
    result = await db.execute(select(UserPermission).where(UserPermission.user_id == user_id))
    return result.scalar_one_or_none()


async def load_permission_set(db: AsyncSession, user_id: UUID, role: Role | str) -> PermissionSet:
    """Permission set for a user; admins are never looked up."""
    permissions = PermissionSet.empty(role)
    if permissions.is_admin:
        return permissions
    record = await get_permission_record(db, user_id)
    return PermissionSet.for_user(role, record.permissions if record else None)


async def set_permissions(db: AsyncSession, user_id: UUID, tokens: list[str]) -> UserPermission:
    """Replace a user's grants, creating the record on first write."""
    tokens = _known_tokens(tokens)
    record = await get_permission_record(db, user_id)
    if record is None:
        record = UserPermission(user_id=user_id, permissions=tokens)
        db.add(record)
    else:
        record.permissions = tokens
    await db.commit()
    await db.refresh(record)
    logger.info(f"Permissions for user {user_id} set to {len(tokens)} tokens")
    return record


async def create_permissions(db: AsyncSession, user_id: UUID, tokens: list[str]) -> UserPermission:
    tokens = _known_tokens(tokens)
    if await get_permission_record(db, user_id) is not None:
        raise PermissionRecordExistsError(f"Permissions for user {user_id} already exist")
    record = UserPermission(user_id=user_id, permissions=tokens)
    db.add(record)
    await db.commit()
    await db.refresh(record)
    logger.info(f"Permissions for user {user_id} created")
    return record


async def delete_permissions(db: AsyncSession, user_id: UUID) -> None:
    record = await get_permission_record(db, user_id)
    if record is None:
        raise UserNotFoundError(f"No permissions recorded for user {user_id}")
    await db.delete(record)
    await db.commit()
    logger.info(f"Permissions for user {user_id} deleted")


async def update_employee_permissions(
    db: AsyncSession, user: User, enabled: list[str]
) -> list[str]:
    """Grant an employee the fixed defaults plus the enabled manageable tokens."""
    if user.role is not Role.EMPLOYEE:
        raise NotAnEmployeeError(f"User {user.id} is not an employee")

    invalid = [token for token in enabled if token not in MANAGEABLE_EMPLOYEE_PERMISSIONS]
    if invalid:
        raise PermissionNotAllowedError(invalid)

    final = merge_employee_grants(enabled)
    await set_permissions(db, user.id, final)
    return final


async def list_users_with_permissions(
    db: AsyncSession, role: Role | None = None
) -> list[tuple[User, list[str] | None]]:
    """Non-admin users (or only `role`) paired with their tokens, None if never provisioned."""
    query = select(User).order_by(User.username)
    if role is not None:
        query = query.where(User.role == role)
    else:
        query = query.where(User.role != Role.ADMIN)
    users = (await db.execute(query)).scalars().all()

    if not users:
        return []
    records = (
        await db.execute(
            select(UserPermission).where(UserPermission.user_id.in_([u.id for u in users]))
        )
    ).scalars().all()
    by_user = {record.user_id: list(record.permissions or []) for record in records}
    return [(user, by_user.get(user.id)) for user in users]
