"""Tests for the grant repository."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from vistra.core.permissions.catalog import PermissionCatalog
from vistra.core.permissions.models import Role
from vistra.core.permissions.repos import GrantRepository
from vistra.core.permissions.resolver import PermissionResolver


pytestmark = pytest.mark.unit


@pytest.fixture
async def role(db: AsyncSession) -> Role:
    role = Role(name="editor")
    db.add(role)
    await db.flush()
    return role


class TestUserRoles:
    async def test_revoke_is_idempotent(self, db: AsyncSession, user, role):
        grants = GrantRepository(db)
        await grants.assign_role(user.id, role.id)

        assert await grants.revoke_role(user.id, role.id) is True
        assert await grants.revoke_role(user.id, role.id) is False

    async def test_revoke_unknown_assignment(self, db: AsyncSession, user, role):
        assert await GrantRepository(db).revoke_role(user.id, role.id) is False

    async def test_reassign_reactivates_row(self, db: AsyncSession, user, role, make_user):
        grants = GrantRepository(db)
        admin = await make_user()
        await grants.assign_role(user.id, role.id)
        await grants.revoke_role(user.id, role.id)

        assignment = await grants.assign_role(user.id, role.id, assigned_by=admin.id)

        assert assignment.deleted_at is None
        assert assignment.assigned_by == admin.id
        assert len(await grants.list_user_role_rows(user.id)) == 1
        assert [r.id for r in await grants.get_active_roles(user.id)] == [role.id]


class TestUserPermissions:
    async def test_assign_and_revoke(self, db: AsyncSession, user):
        permission = await PermissionCatalog(db).get_or_create_permission("files:read")
        grants = GrantRepository(db)

        await grants.assign_permission(user.id, permission.id)
        assert await grants.count_active_assignments(user.id) == (0, 1)

        assert await grants.revoke_permission(user.id, permission.id) is True
        assert await grants.revoke_permission(user.id, permission.id) is False
        assert await grants.get_active_direct_permissions(user.id) == []
        assert len(await grants.list_user_permission_rows(user.id)) == 1


class TestRolePermissions:
    async def test_link_is_unique(self, db: AsyncSession, role):
        permission = await PermissionCatalog(db).get_or_create_permission("files:read")
        grants = GrantRepository(db)

        assert await grants.add_permission_to_role(role.id, permission.id) is True
        assert await grants.add_permission_to_role(role.id, permission.id) is False
        assert [p.name for p in await grants.get_role_permissions(role.id)] == ["files:read"]

    async def test_clear_and_bulk_lookup(self, db: AsyncSession, role):
        catalog = PermissionCatalog(db)
        grants = GrantRepository(db)
        for name in ("files:write", "files:read"):
            permission = await catalog.get_or_create_permission(name)
            await grants.add_permission_to_role(role.id, permission.id)

        by_role = await grants.get_permissions_for_roles([role.id])
        assert [p.name for p in by_role[role.id]] == ["files:read", "files:write"]

        assert await grants.clear_role_permissions(role.id) == 2
        assert await grants.get_role_permissions(role.id) == []

    async def test_unlink_removes_permission_from_holders(
        self, db: AsyncSession, role, user
    ):
        catalog = PermissionCatalog(db)
        grants = GrantRepository(db)
        read = await catalog.get_or_create_permission("files:read")
        write = await catalog.get_or_create_permission("files:write")
        await grants.add_permission_to_role(role.id, read.id)
        await grants.add_permission_to_role(role.id, write.id)
        await grants.assign_role(user.id, role.id)

        assert await grants.remove_permission_from_role(role.id, write.id) is True
        assert await grants.remove_permission_from_role(role.id, write.id) is False

        assert [p.name for p in await grants.get_role_permissions(role.id)] == ["files:read"]
        names = await PermissionResolver(db).get_permission_names(user.id)
        assert names == {"files:read"}
        assert await catalog.get_permission(write.id) is not None
