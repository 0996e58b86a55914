"""Role management API routes."""

from uuid import UUID

from fastapi import APIRouter, status

from vistra.api.dependencies import DBSession
from vistra.core.auth.dependencies import CurrentUser
from vistra.core.permissions.cache import PermissionCacheDep
from vistra.core.permissions.decorators import require_any_permission, require_permission
from vistra.core.permissions.models import Permission, Role
from vistra.modules.roles.schemas import (
    RoleCreate,
    RolePermissionResponse,
    RoleResponse,
    RoleUpdate,
)
from vistra.modules.roles.services import RoleSvc


router = APIRouter(prefix="/roles", tags=["roles"])

# Admins managing a user's roles need to see the available roles too
LIST_ROLES = ["roles:read", "roles:*", "users:write", "users:*", "*:*"]


def _role_response(role: Role, permissions: list[Permission]) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        name=role.name,
        description=role.description,
        created_at=role.created_at,
        updated_at=role.updated_at,
        permissions=[RolePermissionResponse.model_validate(p) for p in permissions],
    )


@router.get("", response_model=list[RoleResponse])
@require_any_permission(LIST_ROLES)
async def list_roles(
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: RoleSvc,
) -> list[RoleResponse]:
    """List all roles with their permissions."""
    return [
        _role_response(role, permissions)
        for role, permissions in await service.list_roles()
    ]


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
@require_permission("roles", "write")
async def create_role(
    data: RoleCreate,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: RoleSvc,
) -> RoleResponse:
    """Create a role.

    Supplying permissions additionally requires ``permissions:*`` or
    ``permissions:write``.
    """
    role = await service.create_role(data, actor_id=current_user.id)
    return _role_response(role, await service.get_role_permissions(role.id))


@router.get("/{role_id}", response_model=RoleResponse)
@require_permission("roles", "read")
async def get_role(
    role_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: RoleSvc,
) -> RoleResponse:
    """Get a role with its permissions."""
    role = await service.get_role(role_id)
    return _role_response(role, await service.get_role_permissions(role.id))


@router.put("/{role_id}", response_model=RoleResponse)
@require_permission("roles", "write")
async def update_role(
    role_id: UUID,
    data: RoleUpdate,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: RoleSvc,
) -> RoleResponse:
    """Update a role. A supplied permission list replaces the current one."""
    role = await service.update_role(role_id, data, actor_id=current_user.id)
    return _role_response(role, await service.get_role_permissions(role.id))


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
@require_permission("roles", "write")
async def delete_role(
    role_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: RoleSvc,
) -> None:
    """Delete a role."""
    await service.delete_role(role_id, actor_id=current_user.id)
