"""Permission catalog.

The catalog is the source of truth for which permissions exist. New
permissions are created on demand when an admin uses a well-formed name
that is not in the catalog yet.
"""

from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from vistra.api.dependencies import DBSession
from vistra.core.permissions.models import Permission
from vistra.core.permissions.names import parse_permission_name


logger = structlog.get_logger()


class PermissionCatalog:
    """Repository and get-or-create logic for Permission rows."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def get_permission(self, permission_id: UUID) -> Permission | None:
        """Get a permission by ID.

        Returns:
            Permission if found, None otherwise
        """
        return await self.session.get(Permission, permission_id)

    async def get_by_name(self, name: str) -> Permission | None:
        """Get a permission by its exact name."""
        stmt = select(Permission).where(Permission.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_permissions(self) -> list[Permission]:
        """List all permissions ordered by resource then action."""
        stmt = select(Permission).order_by(Permission.resource, Permission.action)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        """Count permissions in the catalog."""
        result = await self.session.execute(select(func.count()).select_from(Permission))
        return result.scalar_one()

    async def get_or_create(
        self,
        name: str,
        description: str | None = None,
    ) -> tuple[Permission, bool]:
        """Return the permission named ``name``, creating it if needed.

        The insert runs in a savepoint. If a concurrent request created
        the same name first, the unique constraint rejects our insert and
        the winner's row is returned instead.

        Args:
            name: Permission name such as "files:read"
            description: Description used only when creating

        Returns:
            Tuple of (permission, created). ``created`` is False when the
            row already existed or another request inserted it first.

        Raises:
            InvalidPermissionFormatError: If the name is malformed
        """
        resource, action = parse_permission_name(name)

        existing = await self.get_by_name(name)
        if existing is not None:
            return existing, False

        permission = Permission(
            name=name,
            resource=resource,
            action=action,
            description=description,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(permission)
        except IntegrityError:
            existing = await self.get_by_name(name)
            if existing is None:
                raise
            logger.info("permission_create_race_lost", name=name)
            return existing, False

        logger.info("permission_created", name=name, permission_id=str(permission.id))
        return permission, True

    async def get_or_create_permission(
        self,
        name: str,
        description: str | None = None,
    ) -> Permission:
        """Like ``get_or_create`` but returns only the permission."""
        permission, _ = await self.get_or_create(name, description)
        return permission
