"""Unit tests for configuration precedence: override > role default > built-in fallback."""

from unittest.mock import AsyncMock, MagicMock
import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from estate_admin.access.permissions import PermissionSet
from estate_admin.access.roles import Role
from estate_admin.db.seed_sidebar import FALLBACK_SIDEBAR_ITEMS, fallback_config_name
from estate_admin.models.sidebar_config import SidebarConfig
from estate_admin.services import precedence, sidebar_store


def make_config(name, role=Role.EMPLOYEE, items=None, is_default=False, user_id=None):
    return SidebarConfig(
        id=uuid.uuid4(),
        name=name,
        role=role,
        items=items if items is not None else [],
        is_default=is_default,
        user_id=user_id,
        version=1,
    )


class FakeStore:
    """In-memory stand-in for the three store reads/writes precedence needs."""

    def __init__(self, override=None, default=None):
        self.override = override
        self.default = default
        self.fallback_writes = 0

    async def get_user_override(self, db, user_id, role):
        return self.override

    async def get_role_default(self, db, role):
        return self.default

    async def create_fallback_default(self, db, role):
        self.fallback_writes += 1
        self.default = make_config(
            fallback_config_name(role), role, list(FALLBACK_SIDEBAR_ITEMS), is_default=True
        )
        return self.default


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore()
    monkeypatch.setattr(sidebar_store, "get_user_override", fake.get_user_override)
    monkeypatch.setattr(sidebar_store, "get_role_default", fake.get_role_default)
    monkeypatch.setattr(sidebar_store, "create_fallback_default", fake.create_fallback_default)
    return fake


@pytest.mark.asyncio
async def test_override_wins_over_role_default(store):
    user_id = uuid.uuid4()
    store.override = make_config("override", user_id=user_id)
    store.default = make_config("default", is_default=True)

    config = await precedence.resolve_config(AsyncMock(), user_id, Role.EMPLOYEE)

    assert config is store.override
    assert store.fallback_writes == 0


@pytest.mark.asyncio
async def test_role_default_used_without_override(store):
    store.default = make_config("default", is_default=True)
    config = await precedence.resolve_config(AsyncMock(), uuid.uuid4(), "employee")
    assert config is store.default


@pytest.mark.asyncio
async def test_fallback_persisted_once_and_stable(store):
    db = AsyncMock()
    first = await precedence.resolve_config(db, uuid.uuid4(), Role.EMPLOYEE)
    second = await precedence.resolve_config(db, uuid.uuid4(), Role.EMPLOYEE)

    assert store.fallback_writes == 1
    assert first is second
    assert [i["id"] for i in first.items] == [i["id"] for i in second.items]
    assert first.is_default


@pytest.mark.asyncio
async def test_role_preview_skips_override_lookup(store):
    store.override = make_config("override", user_id=uuid.uuid4())
    store.default = make_config("default", is_default=True)
    config = await precedence.resolve_config(AsyncMock(), None, Role.EMPLOYEE)
    assert config is store.default


@pytest.mark.asyncio
async def test_plain_user_role_rejected(store):
    with pytest.raises(ValueError):
        await precedence.resolve_config(AsyncMock(), uuid.uuid4(), Role.USER)


@pytest.mark.asyncio
async def test_concurrent_fallback_insert_reads_back_winner(monkeypatch):
    winner = make_config("Built-in employee sidebar", is_default=True)
    get_default = AsyncMock(side_effect=[None, winner])
    monkeypatch.setattr(sidebar_store, "get_user_override", AsyncMock(return_value=None))
    monkeypatch.setattr(sidebar_store, "get_role_default", get_default)
    monkeypatch.setattr(
        sidebar_store,
        "create_fallback_default",
        AsyncMock(side_effect=IntegrityError("insert", {}, Exception("duplicate key"))),
    )
    db = AsyncMock()

    config = await precedence.resolve_config(db, uuid.uuid4(), Role.EMPLOYEE)

    assert config is winner
    db.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_store_failure_propagates(monkeypatch):
    monkeypatch.setattr(
        sidebar_store, "get_user_override", AsyncMock(side_effect=ConnectionError("store down"))
    )
    with pytest.raises(ConnectionError):
        await precedence.resolve_config(AsyncMock(), uuid.uuid4(), Role.ADMIN)


@pytest.mark.asyncio
async def test_resolve_sidebar_filters_for_employee(store):
    store.default = make_config("fallback", is_default=True, items=list(FALLBACK_SIDEBAR_ITEMS))
    perms = PermissionSet.for_user(Role.EMPLOYEE, ["view_posts"])

    resolved = await precedence.resolve_sidebar(AsyncMock(), uuid.uuid4(), Role.EMPLOYEE, perms)

    assert [i.id for i in resolved.items] == ["dashboard", "posts"]
    assert resolved.role is Role.EMPLOYEE
    assert resolved.config is store.default


@pytest.mark.asyncio
async def test_resolve_sidebar_loads_permissions_when_not_given(store, monkeypatch):
    store.default = make_config("fallback", is_default=True, items=list(FALLBACK_SIDEBAR_ITEMS))
    loader = AsyncMock(return_value=PermissionSet.for_user(Role.EMPLOYEE, ["view_projects"]))
    monkeypatch.setattr(precedence.permission_store, "load_permission_set", loader)
    user_id = uuid.uuid4()

    resolved = await precedence.resolve_sidebar(AsyncMock(), user_id, Role.EMPLOYEE)

    loader.assert_awaited_once()
    assert [i.id for i in resolved.items] == ["dashboard", "projects"]
