"""Authentication API routes."""

from fastapi import APIRouter

from vistra.api.dependencies import DBSession
from vistra.core.auth.dependencies import CurrentUser
from vistra.core.auth.schemas import CurrentUserResponse
from vistra.core.permissions.cache import PermissionCacheDep
from vistra.core.permissions.resolver import PermissionResolver


router = APIRouter(prefix="/auth", tags=["auth"])


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    summary="Get current user",
    description="Returns the authenticated user and their effective permission names.",
)
async def get_me(
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
) -> CurrentUserResponse:
    """Get the authenticated user's profile and permissions."""
    resolver = PermissionResolver(db, cache=permission_cache)
    names = await resolver.get_permission_names(current_user.id)

    return CurrentUserResponse(
        id=current_user.id,
        email=current_user.email,
        name=current_user.name,
        is_system_account=current_user.is_system_account,
        permissions=sorted(names),
    )
