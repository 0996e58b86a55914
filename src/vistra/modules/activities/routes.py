"""Activity log API routes."""

from fastapi import APIRouter

from vistra.api.dependencies import DBSession, PageParams
from vistra.core.auth.dependencies import CurrentUser
from vistra.core.permissions.decorators import require_permission
from vistra.modules.activities.repos import ActivityRepo
from vistra.modules.activities.schemas import ActivityListResponse, ActivityResponse


router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("", response_model=ActivityListResponse)
@require_permission("activities", "read")
async def list_activities(
    current_user: CurrentUser,
    db: DBSession,
    repo: ActivityRepo,
    pagination: PageParams,
) -> ActivityListResponse:
    """List recent activity, newest first."""
    rows = await repo.list_recent(limit=pagination.page_size, offset=pagination.offset)
    return ActivityListResponse(
        items=[ActivityResponse.from_row(activity, user) for activity, user in rows],
        total=await repo.count(),
        page=pagination.page,
        page_size=pagination.page_size,
    )
