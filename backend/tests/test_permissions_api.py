"""Unit tests for the permission management API."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
import uuid

import pytest
from fastapi import HTTPException

from estate_admin.access.catalog import DEFAULT_EMPLOYEE_PERMISSIONS
from estate_admin.access.roles import Role
from estate_admin.schemas.auth import CurrentUser
from estate_admin.schemas.permission import PermissionsUpdate
from estate_admin.services import permission_store


def make_current(role=Role.ADMIN, permissions=None, user_id=None):
    return CurrentUser(
        id=user_id or uuid.uuid4(),
        username="caller",
        email="caller@example.com",
        role=role,
        permissions=permissions or [],
        is_active=True,
    )


def make_account(role=Role.EMPLOYEE):
    user = MagicMock()
    user.id = uuid.uuid4()
    user.username = "employee1"
    user.email = "employee1@example.com"
    user.role = role
    user.is_active = True
    user.created_at = datetime.now(timezone.utc)
    return user


@pytest.mark.asyncio
async def test_catalog_lists_groups():
    from estate_admin.api.permissions import available_permissions

    response = await available_permissions(make_current())
    assert "users" in response.permission_groups
    assert response.default_employee_permissions == DEFAULT_EMPLOYEE_PERMISSIONS


@pytest.mark.asyncio
async def test_employee_cannot_read_other_users_permissions():
    from estate_admin.api.permissions import get_user_permissions

    with pytest.raises(HTTPException) as exc_info:
        await get_user_permissions(uuid.uuid4(), make_current(Role.EMPLOYEE), AsyncMock())
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_employee_reads_own_permissions(monkeypatch):
    from estate_admin.api.permissions import get_user_permissions

    account = make_account()
    monkeypatch.setattr(permission_store, "get_user", AsyncMock(return_value=account))
    record = MagicMock()
    record.permissions = ["view_users"]
    monkeypatch.setattr(permission_store, "get_permission_record", AsyncMock(return_value=record))

    response = await get_user_permissions(
        account.id, make_current(Role.EMPLOYEE, user_id=account.id), AsyncMock()
    )
    assert response.permissions == ["view_users"]


@pytest.mark.asyncio
async def test_unknown_user_is_404(monkeypatch):
    from estate_admin.api.permissions import update_user_permissions
    from estate_admin.services.errors import UserNotFoundError

    monkeypatch.setattr(
        permission_store, "get_user", AsyncMock(side_effect=UserNotFoundError("nope"))
    )
    with pytest.raises(HTTPException) as exc_info:
        await update_user_permissions(
            uuid.uuid4(), PermissionsUpdate(permissions=[]), make_current(), AsyncMock()
        )
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_create_permissions_twice_conflicts(monkeypatch):
    from estate_admin.api.permissions import create_user_permissions
    from estate_admin.schemas.permission import PermissionsCreate

    account = make_account()
    monkeypatch.setattr(permission_store, "get_user", AsyncMock(return_value=account))
    monkeypatch.setattr(
        permission_store, "get_permission_record", AsyncMock(return_value=MagicMock())
    )

    with pytest.raises(HTTPException) as exc_info:
        await create_user_permissions(
            PermissionsCreate(user_id=account.id, permissions=["view_users"]),
            make_current(),
            AsyncMock(),
        )
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_update_employee_merges_defaults(monkeypatch):
    from estate_admin.api.permissions import update_employee_permissions

    account = make_account()
    monkeypatch.setattr(permission_store, "get_user", AsyncMock(return_value=account))
    saved = AsyncMock()
    monkeypatch.setattr(permission_store, "set_permissions", saved)

    response = await update_employee_permissions(
        account.id,
        PermissionsUpdate(permissions=["view_statistics", "manage_prices"]),
        make_current(),
        AsyncMock(),
    )

    assert response.added_permissions == ["view_statistics", "manage_prices"]
    assert response.permissions[: len(DEFAULT_EMPLOYEE_PERMISSIONS)] == DEFAULT_EMPLOYEE_PERMISSIONS
    saved.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_employee_rejects_unmanageable_token(monkeypatch):
    from estate_admin.api.permissions import update_employee_permissions

    monkeypatch.setattr(permission_store, "get_user", AsyncMock(return_value=make_account()))

    with pytest.raises(HTTPException) as exc_info:
        await update_employee_permissions(
            uuid.uuid4(),
            PermissionsUpdate(permissions=["manage_permissions"]),
            make_current(),
            AsyncMock(),
        )
    assert exc_info.value.status_code == 400
    assert "manage_permissions" in exc_info.value.detail


@pytest.mark.asyncio
async def test_update_employee_rejects_non_employee(monkeypatch):
    from estate_admin.api.permissions import update_employee_permissions

    monkeypatch.setattr(
        permission_store, "get_user", AsyncMock(return_value=make_account(Role.ADMIN))
    )
    with pytest.raises(HTTPException) as exc_info:
        await update_employee_permissions(
            uuid.uuid4(), PermissionsUpdate(permissions=[]), make_current(), AsyncMock()
        )
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_employee_cannot_edit_own_grants():
    from estate_admin.api.permissions import update_employee_permissions

    me = make_current(Role.EMPLOYEE, ["change_user_role"])
    with pytest.raises(HTTPException) as exc_info:
        await update_employee_permissions(
            me.id, PermissionsUpdate(permissions=["view_statistics"]), me, AsyncMock()
        )
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_never_provisioned_employee_shows_defaults(monkeypatch):
    from estate_admin.api.permissions import list_employees

    fresh = make_account()
    granted = make_account()
    monkeypatch.setattr(
        permission_store,
        "list_users_with_permissions",
        AsyncMock(return_value=[(fresh, None), (granted, [*DEFAULT_EMPLOYEE_PERMISSIONS, "view_statistics"])]),
    )

    response = await list_employees(make_current(), AsyncMock())

    assert response.employees[0].permissions == DEFAULT_EMPLOYEE_PERMISSIONS
    assert response.employees[0].enabled_permissions == []
    assert response.employees[1].enabled_permissions == ["view_statistics"]


@pytest.mark.asyncio
async def test_unknown_token_rejected_on_update(monkeypatch):
    from estate_admin.api.permissions import update_user_permissions

    account = make_account()
    monkeypatch.setattr(permission_store, "get_user", AsyncMock(return_value=account))
    mock_db = AsyncMock()

    with pytest.raises(HTTPException) as exc_info:
        await update_user_permissions(
            account.id,
            PermissionsUpdate(permissions=["not_a_real_token", "view_posts"]),
            make_current(),
            mock_db,
        )

    assert exc_info.value.status_code == 400
    assert "not_a_real_token" in exc_info.value.detail
    mock_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_unknown_token_rejected_on_create(monkeypatch):
    from estate_admin.api.permissions import create_user_permissions
    from estate_admin.schemas.permission import PermissionsCreate

    account = make_account()
    monkeypatch.setattr(permission_store, "get_user", AsyncMock(return_value=account))
    monkeypatch.setattr(permission_store, "get_permission_record", AsyncMock(return_value=None))

    with pytest.raises(HTTPException) as exc_info:
        await create_user_permissions(
            PermissionsCreate(user_id=account.id, permissions=["view_post"]),
            make_current(),
            AsyncMock(),
        )
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_set_permissions_stores_cleaned_catalog_tokens():
    mock_db = AsyncMock()
    mock_db.add = MagicMock()
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = None
    mock_db.execute.return_value = mock_result

    record = await permission_store.set_permissions(
        mock_db, uuid.uuid4(), [" view_posts ", "view_posts", "edit_post"]
    )

    assert record.permissions == ["view_posts", "edit_post"]
    mock_db.add.assert_called_once_with(record)


@pytest.mark.asyncio
async def test_employee_listing_flags_unprovisioned(monkeypatch):
    from estate_admin.api.permissions import list_employees

    fresh = make_account()
    granted = make_account()
    monkeypatch.setattr(
        permission_store,
        "list_users_with_permissions",
        AsyncMock(return_value=[(fresh, None), (granted, ["view_users"])]),
    )

    response = await list_employees(make_current(), AsyncMock())

    assert response.employees[0].provisioned is False
    assert response.employees[1].provisioned is True


def test_employee_toggle_needs_view_users_as_well():
    from fastapi.testclient import TestClient

    from estate_admin.core.deps import get_current_user
    from estate_admin.db.base import get_db
    from estate_admin.main import app

    async def fake_db():
        yield AsyncMock()

    app.dependency_overrides[get_current_user] = lambda: make_current(
        Role.EMPLOYEE, ["change_user_role"]
    )
    app.dependency_overrides[get_db] = fake_db
    try:
        response = TestClient(app).put(
            f"/api/v1/permissions/employee/{uuid.uuid4()}", json={"permissions": []}
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 403
    assert "view_users" in response.json()["detail"]
