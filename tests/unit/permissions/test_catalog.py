"""Tests for the permission catalog."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from vistra.core.errors import InvalidPermissionFormatError
from vistra.core.permissions.catalog import PermissionCatalog
from vistra.modules.activities.repos import ActivityRepository
from vistra.modules.permissions.services import PermissionService


pytestmark = pytest.mark.unit


def stale_first_lookup(catalog: PermissionCatalog, monkeypatch) -> list[str]:
    """Make the catalog miss an existing row once.

    Mimics another request inserting the row between our lookup and insert.
    """
    real_get_by_name = catalog.get_by_name
    calls: list[str] = []

    async def lookup(name: str):
        calls.append(name)
        if len(calls) == 1:
            return None
        return await real_get_by_name(name)

    monkeypatch.setattr(catalog, "get_by_name", lookup)
    return calls


class TestGetOrCreatePermission:
    async def test_creates_with_split_name(self, db: AsyncSession):
        catalog = PermissionCatalog(db)

        permission = await catalog.get_or_create_permission("files:*", "Any file action")

        assert permission.resource == "files"
        assert permission.action == "*"
        assert permission.description == "Any file action"

    async def test_returns_existing(self, db: AsyncSession):
        catalog = PermissionCatalog(db)

        first = await catalog.get_or_create_permission("files:read")
        second = await catalog.get_or_create_permission("files:read", "ignored")

        assert second.id == first.id
        assert second.description is None
        assert await catalog.count() == 1

    async def test_invalid_name_creates_nothing(self, db: AsyncSession):
        catalog = PermissionCatalog(db)

        with pytest.raises(InvalidPermissionFormatError):
            await catalog.get_or_create_permission("files")

        assert await catalog.count() == 0

    async def test_get_or_create_reports_creation(self, db: AsyncSession):
        catalog = PermissionCatalog(db)

        first, created = await catalog.get_or_create("files:read")
        again, created_again = await catalog.get_or_create("files:read")

        assert created is True
        assert created_again is False
        assert again.id == first.id

    async def test_concurrent_insert_returns_winner(self, db: AsyncSession, monkeypatch):
        catalog = PermissionCatalog(db)
        winner = await catalog.get_or_create_permission("files:read")
        calls = stale_first_lookup(catalog, monkeypatch)

        permission, created = await catalog.get_or_create("files:read")

        assert permission.id == winner.id
        assert created is False
        assert len(calls) == 2
        assert await catalog.count() == 1


async def test_lost_race_logs_no_activity(db: AsyncSession, monkeypatch):
    service = PermissionService(db)
    winner = await service.catalog.get_or_create_permission("files:read")
    stale_first_lookup(service.catalog, monkeypatch)

    permission, created = await service.create_permission("files:read", None, actor_id=None)

    assert permission.id == winner.id
    assert created is False
    assert await ActivityRepository(db).count() == 0


async def test_list_permissions_ordered(db: AsyncSession):
    catalog = PermissionCatalog(db)
    for name in ("users:write", "files:read", "users:read"):
        await catalog.get_or_create_permission(name)

    names = [p.name for p in await catalog.list_permissions()]

    assert names == ["files:read", "users:read", "users:write"]
