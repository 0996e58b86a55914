"""Permission catalog API routes."""

from uuid import UUID

from fastapi import APIRouter, Response, status

from vistra.api.dependencies import DBSession
from vistra.core.auth.dependencies import CurrentUser
from vistra.core.permissions.cache import PermissionCacheDep
from vistra.core.permissions.decorators import require_any_permission, require_permission
from vistra.modules.permissions.schemas import PermissionCreate, PermissionResponse
from vistra.modules.permissions.services import PermissionSvc


router = APIRouter(prefix="/permissions", tags=["permissions"])

# Admins managing a user's direct permissions need to see the catalog too
LIST_PERMISSIONS = ["permissions:read", "permissions:*", "users:write", "users:*", "*:*"]


@router.get("", response_model=list[PermissionResponse])
@require_any_permission(LIST_PERMISSIONS)
async def list_permissions(
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: PermissionSvc,
) -> list[PermissionResponse]:
    """List the permission catalog ordered by resource and action."""
    return [
        PermissionResponse.model_validate(permission)
        for permission in await service.list_permissions()
    ]


@router.get("/{permission_id}", response_model=PermissionResponse)
@require_permission("permissions", "read")
async def get_permission(
    permission_id: UUID,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: PermissionSvc,
) -> PermissionResponse:
    """Get a permission by ID."""
    return PermissionResponse.model_validate(await service.get_permission(permission_id))


@router.post(
    "",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"description": "Permission already existed"}},
)
@require_permission("permissions", "write")
async def create_permission(
    data: PermissionCreate,
    response: Response,
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
    service: PermissionSvc,
) -> PermissionResponse:
    """Add a permission to the catalog.

    Creating a name that already exists returns the existing entry with
    status 200.
    """
    permission, created = await service.create_permission(
        data.name, data.description, actor_id=current_user.id
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return PermissionResponse.model_validate(permission)
