"""User management API routes."""

from uuid import UUID

from fastapi import APIRouter, status

from vistra.api.dependencies import DBSession, PageParams
from vistra.core.auth.dependencies import CurrentUser
from vistra.core.permissions.cache import PermissionCacheDep
from vistra.core.permissions.decorators import require_access, require_permission
from vistra.modules.users.schemas import (
    AssignPermissionRequest,
    AssignRoleRequest,
    UserAccessResponse,
    UserCreate,
    UserDetailResponse,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from vistra.modules.users.services import UserAccessSvc, UserSvc


router = APIRouter(prefix="/users", tags=["users"])

MANAGE_ROLES = ["roles:*", "roles:write"]
MANAGE_PERMISSIONS = ["permissions:*", "permissions:write"]


@router.get("", response_model=UserListResponse)
@require_permission("users", "read")
async def list_users(
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: UserSvc,
    pagination: PageParams,
) -> UserListResponse:
    """List users, newest first."""
    users, total = await service.list_users(
        page=pagination.page,
        page_size=pagination.page_size,
    )
    return UserListResponse(
        items=[UserResponse.model_validate(user) for user in users],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@require_permission("users", "write")
async def create_user(
    data: UserCreate,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: UserSvc,
) -> UserResponse:
    """Create a user account."""
    user = await service.create_user(data, actor_id=current_user.id)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserDetailResponse)
@require_permission("users", "read")
async def get_user(
    user_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: UserSvc,
) -> UserDetailResponse:
    """Get a user with roles, direct permissions and effective permissions."""
    user = await service.get_user(user_id)
    access = await service.get_access(user.id)
    return UserDetailResponse(
        **UserResponse.model_validate(user).model_dump(),
        **access.model_dump(),
    )


@router.put("/{user_id}", response_model=UserResponse)
@require_permission("users", "write")
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: UserSvc,
) -> UserResponse:
    """Update a user's email or name. System accounts are refused."""
    user = await service.update_user(user_id, data, actor_id=current_user.id)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
@require_permission("users", "delete")
async def delete_user(
    user_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: UserSvc,
) -> None:
    """Delete a user. System accounts and the caller's own account are refused."""
    await service.delete_user(user_id, actor_id=current_user.id)


# ============================================================
# Grants
# ============================================================


@router.post("/{user_id}/roles", response_model=UserAccessResponse)
@require_access(("users", "write"), any_of=MANAGE_ROLES)
async def assign_role(
    user_id: UUID,
    data: AssignRoleRequest,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: UserAccessSvc,
) -> UserAccessResponse:
    """Assign a role to a user."""
    return await service.assign_role(user_id, data.role_id, actor_id=current_user.id)


@router.delete("/{user_id}/roles/{role_id}", response_model=UserAccessResponse)
@require_access(("users", "write"), any_of=MANAGE_ROLES)
async def revoke_role(
    user_id: UUID,
    role_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: UserAccessSvc,
) -> UserAccessResponse:
    """Revoke a role from a user."""
    return await service.revoke_role(user_id, role_id, actor_id=current_user.id)


@router.post("/{user_id}/permissions", response_model=UserAccessResponse)
@require_access(("users", "write"), any_of=MANAGE_PERMISSIONS)
async def assign_permission(
    user_id: UUID,
    data: AssignPermissionRequest,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: UserAccessSvc,
) -> UserAccessResponse:
    """Grant a permission directly to a user."""
    return await service.assign_permission(
        user_id, data.permission_id, actor_id=current_user.id
    )


@router.delete(
    "/{user_id}/permissions/{permission_id}",
    response_model=UserAccessResponse,
)
@require_access(("users", "write"), any_of=MANAGE_PERMISSIONS)
async def revoke_permission(
    user_id: UUID,
    permission_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: UserAccessSvc,
) -> UserAccessResponse:
    """Revoke a direct permission from a user."""
    return await service.revoke_permission(
        user_id, permission_id, actor_id=current_user.id
    )
