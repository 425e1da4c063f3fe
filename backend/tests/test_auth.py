"""Unit tests for auth: security utils + dependency logic."""

from unittest.mock import AsyncMock, MagicMock
import uuid
from datetime import timedelta

import pytest
from fastapi import HTTPException
from jose import JWTError

from estate_admin.access.roles import Role
from estate_admin.core.security import hash_password, verify_password, create_access_token, decode_access_token
from estate_admin.schemas.auth import CurrentUser, LoginRequest


def current_user(role=Role.EMPLOYEE, permissions=None):
    return CurrentUser(
        id=uuid.uuid4(),
        username="someone",
        email="someone@example.com",
        role=role,
        permissions=permissions or [],
        is_active=True,
    )


def db_returning(user):
    mock_db = AsyncMock()
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = user
    mock_db.execute.return_value = mock_result
    return mock_db


# ── Password hashing ──────────────────────────────

def test_hash_and_verify():
    plain = "SecurePass123!"
    hashed = hash_password(plain)
    assert hashed != plain
    assert verify_password(plain, hashed)
    assert not verify_password("wrong", hashed)


# ── JWT ────────────────────────────────────────────

def test_create_and_decode_token():
    uid = uuid.uuid4()
    token = create_access_token(user_id=uid, role="employee")
    payload = decode_access_token(token)
    assert payload["sub"] == str(uid)
    assert payload["role"] == "employee"
    assert "permissions" not in payload


def test_expired_token():
    token = create_access_token(
        user_id=uuid.uuid4(),
        role="admin",
        expires_delta=timedelta(seconds=-1),
    )
    with pytest.raises(JWTError):
        decode_access_token(token)


# ── Login ─────────────────────────────────────────

def make_user(role=Role.EMPLOYEE, active=True, password="secret123"):
    user = MagicMock()
    user.id = uuid.uuid4()
    user.username = "someone"
    user.role = role
    user.is_active = active
    user.hashed_password = hash_password(password)
    return user


@pytest.mark.asyncio
async def test_login_returns_token():
    from estate_admin.api.auth import login

    user = make_user()
    response = await login(LoginRequest(username="someone", password="secret123"), db_returning(user))

    assert response.user_id == user.id
    assert response.role is Role.EMPLOYEE
    assert decode_access_token(response.access_token)["sub"] == str(user.id)


@pytest.mark.asyncio
async def test_login_wrong_password():
    from estate_admin.api.auth import login

    with pytest.raises(HTTPException) as exc_info:
        await login(LoginRequest(username="someone", password="nope"), db_returning(make_user()))
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_login_unknown_user():
    from estate_admin.api.auth import login

    with pytest.raises(HTTPException) as exc_info:
        await login(LoginRequest(username="ghost", password="x"), db_returning(None))
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("user", [make_user(active=False), make_user(role=Role.USER)])
async def test_login_refused_outside_admin_area(user):
    from estate_admin.api.auth import login

    with pytest.raises(HTTPException) as exc_info:
        await login(LoginRequest(username="someone", password="secret123"), db_returning(user))
    assert exc_info.value.status_code == 403


# ── Dependencies ──────────────────────────────────

@pytest.mark.asyncio
async def test_get_current_user_loads_permissions():
    from estate_admin.core.deps import get_current_user

    user = make_user()
    user.email = "someone@example.com"
    user.full_name = None
    mock_db = AsyncMock()
    mock_db.get.return_value = user
    record = MagicMock()
    record.permissions = ["view_users", "view_posts"]
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = record
    mock_db.execute.return_value = mock_result

    token = create_access_token(user_id=user.id, role="employee")
    result = await get_current_user(token, mock_db)

    assert result.id == user.id
    assert result.permissions == ["view_posts", "view_users"]


@pytest.mark.asyncio
async def test_get_current_user_rejects_bad_token():
    from estate_admin.core.deps import get_current_user

    with pytest.raises(HTTPException) as exc_info:
        await get_current_user("not-a-jwt", AsyncMock())
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_get_current_user_rejects_inactive_account():
    from estate_admin.core.deps import get_current_user

    mock_db = AsyncMock()
    mock_db.get.return_value = make_user(active=False)
    token = create_access_token(user_id=uuid.uuid4(), role="employee")

    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(token, mock_db)
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_require_role_blocks_other_roles():
    from estate_admin.core.deps import require_admin, require_admin_area

    with pytest.raises(HTTPException) as exc_info:
        await require_admin(current_user(Role.EMPLOYEE))
    assert exc_info.value.status_code == 403

    with pytest.raises(HTTPException):
        await require_admin_area(current_user(Role.USER))

    employee = current_user(Role.EMPLOYEE)
    assert await require_admin_area(employee) is employee


@pytest.mark.asyncio
async def test_require_permission_any_of_with_admin_bypass():
    from estate_admin.core.deps import require_permission

    checker = require_permission("view_users", "edit_user")
    granted = current_user(permissions=["edit_user"])
    assert await checker(granted) is granted

    with pytest.raises(HTTPException) as exc_info:
        await checker(current_user(permissions=["view_posts"]))
    assert exc_info.value.status_code == 403

    admin = current_user(Role.ADMIN)
    assert await checker(admin) is admin


@pytest.mark.asyncio
async def test_require_all_permissions():
    from estate_admin.core.deps import require_all_permissions

    checker = require_all_permissions("view_users", "edit_user")
    with pytest.raises(HTTPException) as exc_info:
        await checker(current_user(permissions=["view_users"]))
    assert "edit_user" in exc_info.value.detail

    both = current_user(permissions=["view_users", "edit_user"])
    assert await checker(both) is both
