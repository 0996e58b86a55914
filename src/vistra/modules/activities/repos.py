"""Activity repository for database operations."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy import func, select

from vistra.api.dependencies import DBSession
from vistra.modules.activities.models import Activity
from vistra.modules.users.models import User


class ActivityRepository:
    """Read access to the activity log."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def list_recent(
        self,
        limit: int,
        offset: int = 0,
    ) -> list[tuple[Activity, User | None]]:
        """List activities newest first, with the acting user if still present."""
        stmt = (
            select(Activity, User)
            .outerjoin(User, User.id == Activity.user_id)
            .order_by(Activity.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [(activity, user) for activity, user in result.all()]

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Activity))
        return result.scalar_one()


ActivityRepo = Annotated[ActivityRepository, Depends(ActivityRepository)]
