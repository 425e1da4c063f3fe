"""Authentication endpoints: login + current profile."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from estate_admin.access.roles import ADMIN_AREA_ROLES
from estate_admin.core.deps import get_current_user
from estate_admin.core.security import create_access_token, verify_password
from estate_admin.db.base import get_db
from estate_admin.models.user import User
from estate_admin.schemas.auth import CurrentUser, LoginRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate an admin-area account via username + password, return JWT."""
    result = await db.execute(select(User).where(User.username == body.username))
    user = result.scalar_one_or_none()

    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    if user.role not in ADMIN_AREA_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account has no access to the admin area",
        )

    logger.info(f"User {user.username} logged in ({user.role.value})")
    token = create_access_token(user_id=user.id, role=user.role.value)
    return TokenResponse(access_token=token, user_id=user.id, role=user.role)


@router.get("/me", response_model=CurrentUser)
async def get_me(current_user: CurrentUser = Depends(get_current_user)):
    """Return the current account with its granted permission tokens."""
    return current_user
