"""Activity logging service.

Admin mutations record what they did through ``ActivityLogger``.
Recording is best effort: a failed insert is rolled back to its own
savepoint and logged, and the caller's transaction carries on.
"""

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from vistra.api.dependencies import DBSession
from vistra.modules.activities.models import Activity


log = structlog.get_logger()


class ActivityLogger:
    """Service for creating activity entries."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def log(
        self,
        action: str,
        resource_type: str,
        resource_id: UUID | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
        user_id: UUID | None = None,
    ) -> Activity | None:
        """Record an activity.

        Args:
            action: Type of action (e.g., "create", "assign_role")
            resource_type: Type of resource (e.g., "user", "role")
            resource_id: ID of the affected resource
            description: Human-readable summary
            metadata: Additional context data
            user_id: The acting user

        Returns:
            The created entry, or None if it could not be written

        Example:
            await activities.log(
                action="assign_role",
                resource_type="user",
                resource_id=user.id,
                metadata={"role_id": str(role.id)},
                user_id=current_user.id,
            )
        """
        entry = Activity(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            description=description,
            metadata_=metadata,
        )

        try:
            async with self.session.begin_nested():
                self.session.add(entry)
        except SQLAlchemyError:
            log.exception(
                "activity_log_failed",
                action=action,
                resource_type=resource_type,
                resource_id=str(resource_id) if resource_id else None,
            )
            return None

        log.info(
            "activity_logged",
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id else None,
            user_id=str(user_id) if user_id else None,
        )
        return entry
