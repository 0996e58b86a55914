"""Dashboard API route.

Each figure is gated by its own ``dashboard:*`` permission, matched by
exact name. A caller without any of them gets an empty object.
"""

from fastapi import APIRouter

from vistra.api.dependencies import DBSession
from vistra.core.auth.dependencies import CurrentUser
from vistra.core.constants import RECENT_ACTIVITY_LIMIT
from vistra.core.permissions.cache import PermissionCacheDep
from vistra.core.permissions.catalog import PermissionCatalog
from vistra.core.permissions.checker import has_any_permission_name
from vistra.core.permissions.resolver import PermissionResolver
from vistra.modules.activities.repos import ActivityRepository
from vistra.modules.activities.schemas import ActivityResponse
from vistra.modules.dashboard.schemas import DashboardResponse
from vistra.modules.roles.repos import RoleRepository
from vistra.modules.users.repos import UserRepository


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse, response_model_exclude_none=True)
async def get_dashboard(
    current_user: CurrentUser,
    db: DBSession,
    permission_cache: PermissionCacheDep,
) -> DashboardResponse:
    """Return the dashboard figures the caller is allowed to see."""
    resolver = PermissionResolver(db, cache=permission_cache)
    permissions = await resolver.resolve_effective_permissions(current_user.id)

    def can(name: str) -> bool:
        return has_any_permission_name(permissions, [name])

    result = DashboardResponse()

    if can("dashboard:users_count"):
        result.users_count = await UserRepository(db).count()

    if can("dashboard:roles_count"):
        result.roles_count = await RoleRepository(db).count()

    if can("dashboard:permissions_count"):
        result.permissions_count = await PermissionCatalog(db).count()

    if can("dashboard:recent_activity"):
        rows = await ActivityRepository(db).list_recent(limit=RECENT_ACTIVITY_LIMIT)
        result.recent_activities = [
            ActivityResponse.from_row(activity, user) for activity, user in rows
        ]

    return result
