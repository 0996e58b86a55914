"""Integration tests for user management endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vistra.core.permissions.catalog import PermissionCatalog
from vistra.core.permissions.models import Role, RolePermission, UserRole
from vistra.modules.activities.repos import ActivityRepository


pytestmark = pytest.mark.integration

USERS = "/api/v1/users"


@pytest.fixture
async def admin(make_user, grant):
    """A non-system user holding every permission."""
    admin = await make_user(name="Admin")
    await grant(admin, "*:*")
    return admin


@pytest.fixture
def admin_headers(admin, headers_for) -> dict[str, str]:
    return headers_for(admin)


@pytest.fixture
async def system_account(make_user):
    return await make_user(is_system_account=True)


@pytest.fixture
async def role(db: AsyncSession) -> Role:
    role = Role(name="editor")
    db.add(role)
    await db.flush()
    return role


class TestUserCrud:
    async def test_create_user(self, client: AsyncClient, admin_headers, db):
        response = await client.post(
            USERS,
            json={"email": "new@example.com", "name": "New", "password": "SecurePass123!"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "new@example.com"
        assert data["is_system_account"] is False
        assert "password_hash" not in data

        [(activity, _)] = await ActivityRepository(db).list_recent(limit=10)
        assert activity.action == "create"
        assert activity.resource_type == "user"

    async def test_create_duplicate_email(self, client: AsyncClient, admin, admin_headers):
        response = await client.post(
            USERS,
            json={"email": admin.email, "name": "Dup", "password": "SecurePass123!"},
            headers=admin_headers,
        )

        assert response.status_code == 409
        assert response.json()["code"] == "email_already_exists"

    async def test_create_requires_permission(self, client: AsyncClient, auth_headers):
        response = await client.post(
            USERS,
            json={"email": "new@example.com", "name": "New", "password": "SecurePass123!"},
            headers=auth_headers,
        )

        assert response.status_code == 403

    async def test_list_users(self, client: AsyncClient, admin_headers, make_user):
        await make_user()

        response = await client.get(USERS, params={"page_size": 1}, headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert len(data["items"]) == 1
        assert data["page_size"] == 1

    async def test_get_user_with_access(
        self, client: AsyncClient, admin_headers, user, grant
    ):
        await grant(user, "files:read")

        response = await client.get(f"{USERS}/{user.id}", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert len(data["roles"]) == 1
        assert data["direct_permissions"] == []
        assert [p["name"] for p in data["permissions"]] == ["files:read"]

    async def test_get_unknown_user(self, client: AsyncClient, admin_headers):
        response = await client.get(
            f"{USERS}/00000000-0000-0000-0000-000000000000", headers=admin_headers
        )

        assert response.status_code == 404
        assert response.json()["code"] == "user_not_found"

    async def test_update_user(self, client: AsyncClient, admin_headers, user):
        response = await client.put(
            f"{USERS}/{user.id}", json={"name": "Renamed"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["email"] == user.email

    async def test_delete_user_cascades_grants(
        self, client: AsyncClient, admin_headers, user, grant, db: AsyncSession
    ):
        await grant(user, "files:read")

        response = await client.delete(f"{USERS}/{user.id}", headers=admin_headers)

        assert response.status_code == 204
        rows = await db.execute(select(UserRole).where(UserRole.user_id == user.id))
        assert rows.scalars().all() == []

    async def test_cannot_delete_self(self, client: AsyncClient, admin, admin_headers):
        response = await client.delete(f"{USERS}/{admin.id}", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "cannot_delete_self"


class TestSystemAccounts:
    """System accounts are refused whatever the caller holds."""

    async def test_update_refused(self, client: AsyncClient, admin_headers, system_account):
        response = await client.put(
            f"{USERS}/{system_account.id}", json={"name": "x"}, headers=admin_headers
        )

        assert response.status_code == 403
        assert response.json()["code"] == "cannot_modify_system_account"

    async def test_delete_refused(self, client: AsyncClient, admin_headers, system_account):
        response = await client.delete(f"{USERS}/{system_account.id}", headers=admin_headers)

        assert response.status_code == 403
        assert response.json()["code"] == "cannot_delete_system_account"

    async def test_assign_role_refused(
        self, client: AsyncClient, system_account, role, make_user, grant, headers_for
    ):
        caller = await make_user()
        await grant(caller, "*:*", "roles:write")

        response = await client.post(
            f"{USERS}/{system_account.id}/roles",
            json={"role_id": str(role.id)},
            headers=headers_for(caller),
        )

        assert response.status_code == 403
        assert response.json()["code"] == "cannot_modify_roles_for_system_account"

    async def test_guard_checked_before_role_lookup(
        self, client: AsyncClient, system_account, make_user, grant, headers_for
    ):
        caller = await make_user()
        await grant(caller, "users:write", "roles:write")

        response = await client.post(
            f"{USERS}/{system_account.id}/roles",
            json={"role_id": "00000000-0000-0000-0000-000000000000"},
            headers=headers_for(caller),
        )

        assert response.status_code == 403

    async def test_revoke_permission_refused(
        self, client: AsyncClient, system_account, make_user, grant, headers_for, db
    ):
        caller = await make_user()
        await grant(caller, "users:write", "permissions:write")
        permission = await PermissionCatalog(db).get_or_create_permission("files:read")

        response = await client.delete(
            f"{USERS}/{system_account.id}/permissions/{permission.id}",
            headers=headers_for(caller),
        )

        assert response.status_code == 403
        assert response.json()["code"] == "cannot_modify_permissions_for_system_account"


class TestUserGrants:
    @pytest.fixture
    async def caller_headers(self, make_user, grant, headers_for):
        caller = await make_user()
        await grant(caller, "users:write", "roles:write", "permissions:write")
        return headers_for(caller)

    async def test_assign_and_revoke_role(
        self, client: AsyncClient, caller_headers, user, role, db
    ):
        permission = await PermissionCatalog(db).get_or_create_permission("files:read")
        db.add(RolePermission(role_id=role.id, permission_id=permission.id))
        await db.flush()

        response = await client.post(
            f"{USERS}/{user.id}/roles", json={"role_id": str(role.id)}, headers=caller_headers
        )

        assert response.status_code == 200
        assert [r["name"] for r in response.json()["roles"]] == ["editor"]
        assert [p["name"] for p in response.json()["permissions"]] == ["files:read"]

        response = await client.delete(
            f"{USERS}/{user.id}/roles/{role.id}", headers=caller_headers
        )

        assert response.status_code == 200
        assert response.json()["roles"] == []
        assert response.json()["permissions"] == []

        row = await db.get(UserRole, (user.id, role.id))
        assert row is not None and row.deleted_at is not None

    async def test_revoke_is_idempotent(
        self, client: AsyncClient, caller_headers, user, role
    ):
        response = await client.delete(
            f"{USERS}/{user.id}/roles/{role.id}", headers=caller_headers
        )

        assert response.status_code == 200
        assert response.json()["roles"] == []

    async def test_assign_unknown_role(self, client: AsyncClient, caller_headers, user):
        response = await client.post(
            f"{USERS}/{user.id}/roles",
            json={"role_id": "00000000-0000-0000-0000-000000000000"},
            headers=caller_headers,
        )

        assert response.status_code == 404
        assert response.json()["code"] == "role_not_found"

    async def test_assign_direct_permission(
        self, client: AsyncClient, caller_headers, user, db
    ):
        permission = await PermissionCatalog(db).get_or_create_permission("files:write")

        response = await client.post(
            f"{USERS}/{user.id}/permissions",
            json={"permission_id": str(permission.id)},
            headers=caller_headers,
        )

        assert response.status_code == 200
        assert [p["name"] for p in response.json()["direct_permissions"]] == ["files:write"]

    async def test_role_management_needs_literal_grant(
        self, client: AsyncClient, user, role, make_user, grant, headers_for
    ):
        caller = await make_user()
        await grant(caller, "users:write")

        response = await client.post(
            f"{USERS}/{user.id}/roles",
            json={"role_id": str(role.id)},
            headers=headers_for(caller),
        )

        assert response.status_code == 403
