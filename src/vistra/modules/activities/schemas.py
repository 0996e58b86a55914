"""Pydantic schemas for the activity log."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from vistra.modules.activities.models import Activity
from vistra.modules.users.models import User


class ActivityResponse(BaseModel):
    """An activity entry with the acting user's name and email."""

    id: UUID
    user_id: UUID | None
    user_name: str | None = None
    user_email: str | None = None
    action: str
    resource_type: str
    resource_id: UUID | None
    description: str | None
    metadata: dict[str, Any] | None
    created_at: datetime

    @classmethod
    def from_row(cls, activity: Activity, user: User | None) -> "ActivityResponse":
        return cls(
            id=activity.id,
            user_id=activity.user_id,
            user_name=user.name if user else None,
            user_email=user.email if user else None,
            action=activity.action,
            resource_type=activity.resource_type,
            resource_id=activity.resource_id,
            description=activity.description,
            metadata=activity.metadata_,
            created_at=activity.created_at,
        )


class ActivityListResponse(BaseModel):
    """Paginated activity list."""

    items: list[ActivityResponse]
    total: int
    page: int
    page_size: int
