"""Dashboard response schema."""

from pydantic import BaseModel

from vistra.modules.activities.schemas import ActivityResponse


class DashboardResponse(BaseModel):
    """Dashboard figures. A field is omitted when the caller may not see it."""

    users_count: int | None = None
    roles_count: int | None = None
    permissions_count: int | None = None
    recent_activities: list[ActivityResponse] | None = None
