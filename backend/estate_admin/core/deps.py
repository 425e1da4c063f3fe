"""Dependency injection: auth middleware, role and permission gates."""

import logging
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from estate_admin.access.roles import Role
from estate_admin.core.security import decode_access_token
from estate_admin.db.base import get_db
from estate_admin.models.user import User
from estate_admin.schemas.auth import CurrentUser
from estate_admin.services.permission_store import load_permission_set

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Decode JWT, load the account and its grants. Raises 401 on invalid/expired token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        user_id = UUID(user_id)
    except (JWTError, ValueError):
        raise credentials_exception

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise credentials_exception

    permissions = await load_permission_set(db, user.id, user.role)
    return CurrentUser(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        permissions=permissions.as_list(),
        is_active=user.is_active,
    )


def require_role(*allowed_roles: Role):
    """Dependency factory: checks the user has one of the allowed roles."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{user.role.value}' not allowed. Required: "
                f"{', '.join(r.value for r in allowed_roles)}",
            )
        return user

    return checker


require_admin = require_role(Role.ADMIN)
require_admin_area = require_role(Role.ADMIN, Role.EMPLOYEE)


def require_permission(*required: str):
    """Dependency factory: the user needs ANY of the tokens; admins always pass."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not user.permission_set.has_any(required):
            logger.info(f"User {user.id} denied, needs any of {list(required)}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permissions: {', '.join(required)}",
            )
        return user

    return checker


def require_all_permissions(*required: str):
    """Dependency factory: the user needs ALL of the tokens; admins always pass."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        granted = user.permission_set
        if not granted.has_all(required):
            missing = sorted(set(required) - granted.tokens)
            logger.info(f"User {user.id} denied, needs all of {list(required)}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permissions: {', '.join(missing)}",
            )
        return user

    return checker
