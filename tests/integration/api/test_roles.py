"""Integration tests for role management endpoints."""

from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from vistra.core.permissions.catalog import PermissionCatalog
from vistra.core.permissions.repos import GrantRepository
from vistra.modules.roles.repos import RoleRepository


pytestmark = pytest.mark.integration

ROLES = "/api/v1/roles"


@pytest.fixture
async def manager_headers(user, grant, auth_headers) -> dict[str, str]:
    """Headers for a user who may manage roles and their permissions."""
    await grant(user, "roles:read", "roles:write", "permissions:write")
    return auth_headers


class TestCreateRole:
    async def test_create_with_permissions(
        self, client: AsyncClient, manager_headers, db: AsyncSession
    ):
        response = await client.post(
            ROLES,
            json={
                "name": "editor",
                "description": "Edits files",
                "permissions": ["files:write", "files:read", "files:read"],
            },
            headers=manager_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "editor"
        assert [p["name"] for p in data["permissions"]] == ["files:read", "files:write"]
        assert await PermissionCatalog(db).get_by_name("files:write") is not None

    async def test_invalid_name_creates_nothing(
        self, client: AsyncClient, manager_headers, db: AsyncSession
    ):
        response = await client.post(
            ROLES,
            json={"name": "editor", "permissions": ["files:read", "bogus"]},
            headers=manager_headers,
        )

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "invalid_permission_format"
        assert data["invalid_permissions"] == ["bogus"]
        assert await RoleRepository(db).get_by_name("editor") is None
        assert await PermissionCatalog(db).get_by_name("files:read") is None

    async def test_permissions_need_literal_grant(
        self, client: AsyncClient, user, grant, auth_headers, db: AsyncSession
    ):
        await grant(user, "roles:write")

        response = await client.post(
            ROLES,
            json={"name": "editor", "permissions": ["files:read"]},
            headers=auth_headers,
        )

        assert response.status_code == 403
        assert await RoleRepository(db).get_by_name("editor") is None

    async def test_without_permissions_needs_only_roles_write(
        self, client: AsyncClient, user, grant, auth_headers
    ):
        await grant(user, "roles:write")

        response = await client.post(ROLES, json={"name": "editor"}, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["permissions"] == []

    async def test_duplicate_name(self, client: AsyncClient, manager_headers):
        await client.post(ROLES, json={"name": "editor"}, headers=manager_headers)

        response = await client.post(ROLES, json={"name": "editor"}, headers=manager_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "role_already_exists"


class TestUpdateRole:
    async def test_replaces_permissions(self, client: AsyncClient, manager_headers):
        created = await client.post(
            ROLES,
            json={"name": "editor", "permissions": ["files:read"]},
            headers=manager_headers,
        )
        role_id = created.json()["id"]

        response = await client.put(
            f"{ROLES}/{role_id}",
            json={"name": "writer", "permissions": ["files:write"]},
            headers=manager_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "writer"
        assert [p["name"] for p in response.json()["permissions"]] == ["files:write"]

    async def test_invalid_name_changes_nothing(self, client: AsyncClient, manager_headers):
        created = await client.post(
            ROLES,
            json={"name": "editor", "permissions": ["files:read"]},
            headers=manager_headers,
        )
        role_id = created.json()["id"]

        response = await client.put(
            f"{ROLES}/{role_id}",
            json={"name": "writer", "permissions": ["files"]},
            headers=manager_headers,
        )

        assert response.status_code == 400

        current = await client.get(f"{ROLES}/{role_id}", headers=manager_headers)
        assert current.json()["name"] == "editor"
        assert [p["name"] for p in current.json()["permissions"]] == ["files:read"]

    async def test_unknown_role(self, client: AsyncClient, manager_headers):
        response = await client.put(
            f"{ROLES}/00000000-0000-0000-0000-000000000000",
            json={"name": "x"},
            headers=manager_headers,
        )

        assert response.status_code == 404
        assert response.json()["code"] == "role_not_found"


class TestListAndDelete:
    async def test_list_with_user_manager_grant(
        self, client: AsyncClient, make_user, grant, headers_for
    ):
        caller = await make_user()
        await grant(caller, "users:write")

        response = await client.get(ROLES, headers=headers_for(caller))

        assert response.status_code == 200
        assert len(response.json()) == 1

    async def test_list_denied_without_grant(self, client: AsyncClient, auth_headers):
        response = await client.get(ROLES, headers=auth_headers)

        assert response.status_code == 403

    async def test_delete_revokes_permissions(
        self, client: AsyncClient, manager_headers, make_user, headers_for, db
    ):
        created = await client.post(
            ROLES,
            json={"name": "editor", "permissions": ["files:read"]},
            headers=manager_headers,
        )
        role_id = created.json()["id"]
        member = await make_user()
        await GrantRepository(db).assign_role(member.id, UUID(role_id))

        response = await client.delete(f"{ROLES}/{role_id}", headers=manager_headers)

        assert response.status_code == 204
        me = await client.get("/api/v1/auth/me", headers=headers_for(member))
        assert me.json()["permissions"] == []


async def test_overlong_permission_name_rejected(
    client: AsyncClient, manager_headers, db: AsyncSession
):
    name = "a" * 300 + ":read"

    response = await client.post(
        ROLES, json={"name": "editor", "permissions": [name]}, headers=manager_headers
    )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_permission_format"
    assert await RoleRepository(db).get_by_name("editor") is None
    assert await PermissionCatalog(db).get_by_name(name) is None
