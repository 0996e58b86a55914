"""Permission catalog service for the admin API."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends

from vistra.api.dependencies import DBSession
from vistra.core.errors import PermissionNotFoundError
from vistra.core.permissions.catalog import PermissionCatalog
from vistra.core.permissions.models import Permission
from vistra.modules.activities.services import ActivityLogger


class PermissionService:
    """Lists, reads and explicitly creates catalog entries."""

    def __init__(self, session: DBSession) -> None:
        self.catalog = PermissionCatalog(session)
        self.activities = ActivityLogger(session)

    async def list_permissions(self) -> list[Permission]:
        return await self.catalog.list_permissions()

    async def get_permission(self, permission_id: UUID) -> Permission:
        """Get a permission by ID.

        Raises:
            PermissionNotFoundError: If the permission does not exist
        """
        permission = await self.catalog.get_permission(permission_id)
        if not permission:
            raise PermissionNotFoundError(permission_id)
        return permission

    async def create_permission(
        self,
        name: str,
        description: str | None,
        actor_id: UUID,
    ) -> tuple[Permission, bool]:
        """Add a permission to the catalog unless it is already there.

        Returns:
            Tuple of (permission, created)

        Raises:
            InvalidPermissionFormatError: If the name is malformed
        """
        permission, created = await self.catalog.get_or_create(name, description)
        if not created:
            return permission, False

        await self.activities.log(
            action="create",
            resource_type="permission",
            resource_id=permission.id,
            description=f"Permission created: {permission.name}",
            metadata={"permission_name": permission.name},
            user_id=actor_id,
        )
        return permission, True


PermissionSvc = Annotated[PermissionService, Depends(PermissionService)]
