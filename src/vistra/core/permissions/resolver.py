"""Effective-permission resolution.

A user's effective permissions are the union of the permissions of
their active roles and their active direct permissions, de-duplicated
by permission ID. Revoked assignments (``deleted_at`` set) never count.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vistra.core.permissions.cache import PermissionCache
from vistra.core.permissions.checker import EffectivePermission
from vistra.core.permissions.models import (
    Permission,
    RolePermission,
    UserPermission,
    UserRole,
)


class PermissionResolver:
    """Computes effective permissions from the grant store.

    Every call reads the database unless a ``PermissionCache`` was
    supplied and still holds a fresh entry for the user.
    """

    def __init__(
        self,
        session: AsyncSession,
        cache: PermissionCache | None = None,
    ) -> None:
        self.session = session
        self.cache = cache

    async def get_role_permissions(self, user_id: UUID) -> list[Permission]:
        """Get permissions reachable through the user's active roles."""
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .where(
                UserRole.user_id == user_id,
                UserRole.deleted_at.is_(None),
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_direct_permissions(self, user_id: UUID) -> list[Permission]:
        """Get the user's active direct permissions."""
        stmt = (
            select(Permission)
            .join(UserPermission, UserPermission.permission_id == Permission.id)
            .where(
                UserPermission.user_id == user_id,
                UserPermission.deleted_at.is_(None),
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def resolve_effective_permissions(
        self, user_id: UUID
    ) -> tuple[EffectivePermission, ...]:
        """Get all effective permissions for a user.

        Args:
            user_id: The user's UUID

        Returns:
            Permissions de-duplicated by ID. Callers must not rely on order.
        """
        if self.cache is not None:
            cached = self.cache.get(user_id)
            if cached is not None:
                return cached

        by_id: dict[UUID, EffectivePermission] = {}
        for permission in await self.get_role_permissions(user_id):
            by_id.setdefault(permission.id, EffectivePermission.from_model(permission))
        for permission in await self.get_direct_permissions(user_id):
            by_id.setdefault(permission.id, EffectivePermission.from_model(permission))

        permissions = tuple(by_id.values())
        if self.cache is not None:
            self.cache.set(user_id, permissions)
        return permissions

    async def get_permission_names(self, user_id: UUID) -> set[str]:
        """Get the effective permission names for a user."""
        permissions = await self.resolve_effective_permissions(user_id)
        return {permission.name for permission in permissions}
