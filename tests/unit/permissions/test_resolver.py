"""Tests for effective-permission resolution."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from vistra.core.permissions.cache import PermissionCache
from vistra.core.permissions.catalog import PermissionCatalog
from vistra.core.permissions.checker import AccessPolicy, PermissionChecker, RequiredPermission
from vistra.core.permissions.repos import GrantRepository
from vistra.core.permissions.resolver import PermissionResolver


pytestmark = pytest.mark.unit


class TestResolveEffectivePermissions:
    async def test_user_without_grants(self, db: AsyncSession, user):
        resolver = PermissionResolver(db)

        assert await resolver.resolve_effective_permissions(user.id) == ()

    async def test_role_grants_exactly_its_permissions(self, db: AsyncSession, user, grant):
        await grant(user, "roles:read")

        names = await PermissionResolver(db).get_permission_names(user.id)

        assert names == {"roles:read"}

    async def test_deduplicates_across_roles(self, db: AsyncSession, user, grant):
        await grant(user, "users:read", "roles:read")
        await grant(user, "users:read")

        permissions = await PermissionResolver(db).resolve_effective_permissions(user.id)

        assert sorted(p.name for p in permissions) == ["roles:read", "users:read"]

    async def test_deduplicates_role_and_direct_grant(self, db: AsyncSession, user, grant):
        await grant(user, "users:read")
        permission = await PermissionCatalog(db).get_or_create_permission("users:read")
        await GrantRepository(db).assign_permission(user.id, permission.id)

        permissions = await PermissionResolver(db).resolve_effective_permissions(user.id)

        assert [p.name for p in permissions] == ["users:read"]

    async def test_revoked_role_no_longer_counts(self, db: AsyncSession, user, grant):
        role = await grant(user, "files:read")
        grants = GrantRepository(db)

        assert await grants.revoke_role(user.id, role.id)

        row = await grants.get_user_role(user.id, role.id)
        assert row is not None
        assert row.deleted_at is not None
        assert await PermissionResolver(db).get_permission_names(user.id) == set()

    async def test_revoked_direct_permission_no_longer_counts(self, db: AsyncSession, user):
        permission = await PermissionCatalog(db).get_or_create_permission("files:read")
        grants = GrantRepository(db)
        await grants.assign_permission(user.id, permission.id)

        await grants.revoke_permission(user.id, permission.id)

        assert await PermissionResolver(db).get_permission_names(user.id) == set()

    async def test_uses_cache_when_supplied(self, db: AsyncSession, user, grant):
        cache = PermissionCache()
        resolver = PermissionResolver(db, cache=cache)
        await grant(user, "files:read")

        first = await resolver.resolve_effective_permissions(user.id)
        await grant(user, "files:write")
        second = await resolver.resolve_effective_permissions(user.id)

        assert second == first

        cache.invalidate(user.id)
        names = await resolver.get_permission_names(user.id)

        assert names == {"files:read", "files:write"}


async def test_checker_against_resolved_permissions(db: AsyncSession, user, grant):
    await grant(user, "roles:read")
    checker = PermissionChecker(PermissionResolver(db))

    read = AccessPolicy(permission=RequiredPermission("roles", "read"))
    write = AccessPolicy(permission=RequiredPermission("roles", "write"))

    assert await checker.check(user.id, read)
    assert not await checker.check(user.id, write)
