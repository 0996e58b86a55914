"""Grant store repository.

Handles the three grant relations: role -> permission links, and the
soft-deletable user -> role and user -> permission assignments.
"""

from uuid import UUID

from sqlalchemy import func, select

from vistra.api.dependencies import DBSession
from vistra.core.permissions.models import (
    Permission,
    Role,
    RolePermission,
    UserPermission,
    UserRole,
)


class GrantRepository:
    """Repository for role and permission grants."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    # ============================================================
    # Role -> Permission links
    # ============================================================

    async def get_role_permissions(self, role_id: UUID) -> list[Permission]:
        """Get the permissions linked to a role."""
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.resource, Permission.action)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_permissions_for_roles(
        self, role_ids: list[UUID]
    ) -> dict[UUID, list[Permission]]:
        """Get the permissions of several roles in one query."""
        by_role: dict[UUID, list[Permission]] = {role_id: [] for role_id in role_ids}
        if not role_ids:
            return by_role

        stmt = (
            select(RolePermission.role_id, Permission)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .where(RolePermission.role_id.in_(role_ids))
            .order_by(Permission.resource, Permission.action)
        )
        result = await self.session.execute(stmt)
        for role_id, permission in result.all():
            by_role[role_id].append(permission)
        return by_role

    async def add_permission_to_role(self, role_id: UUID, permission_id: UUID) -> bool:
        """Link a permission to a role.

        Returns:
            True if a link was created, False if it already existed
        """
        existing = await self.session.get(RolePermission, (role_id, permission_id))
        if existing is not None:
            return False

        self.session.add(RolePermission(role_id=role_id, permission_id=permission_id))
        await self.session.flush()
        return True

    async def remove_permission_from_role(self, role_id: UUID, permission_id: UUID) -> bool:
        """Unlink a permission from a role.

        Returns:
            True if a link was removed
        """
        link = await self.session.get(RolePermission, (role_id, permission_id))
        if link is None:
            return False

        await self.session.delete(link)
        await self.session.flush()
        return True

    async def clear_role_permissions(self, role_id: UUID) -> int:
        """Remove every permission link of a role.

        Returns:
            Number of links removed
        """
        result = await self.session.execute(
            select(RolePermission).where(RolePermission.role_id == role_id)
        )
        links = result.scalars().all()

        for link in links:
            await self.session.delete(link)

        await self.session.flush()
        return len(links)

    # ============================================================
    # User -> Role assignments
    # ============================================================

    async def get_user_role(self, user_id: UUID, role_id: UUID) -> UserRole | None:
        """Get an assignment row, active or revoked."""
        return await self.session.get(UserRole, (user_id, role_id))

    async def get_active_roles(self, user_id: UUID) -> list[Role]:
        """Get the roles currently assigned to a user."""
        stmt = (
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(
                UserRole.user_id == user_id,
                UserRole.deleted_at.is_(None),
            )
            .order_by(Role.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_user_role_rows(self, user_id: UUID) -> list[UserRole]:
        """Get every role assignment row of a user, including revoked ones."""
        stmt = (
            select(UserRole)
            .where(UserRole.user_id == user_id)
            .order_by(UserRole.assigned_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def assign_role(
        self,
        user_id: UUID,
        role_id: UUID,
        assigned_by: UUID | None = None,
    ) -> UserRole:
        """Assign a role to a user.

        A previously revoked assignment is reactivated in place.
        """
        assignment = await self.get_user_role(user_id, role_id)
        if assignment is None:
            assignment = UserRole(
                user_id=user_id,
                role_id=role_id,
                assigned_by=assigned_by,
            )
            self.session.add(assignment)
        else:
            assignment.reactivate(assigned_by)

        await self.session.flush()
        return assignment

    async def revoke_role(self, user_id: UUID, role_id: UUID) -> bool:
        """Soft-delete a user's role assignment.

        Returns:
            True if an active assignment was revoked
        """
        assignment = await self.get_user_role(user_id, role_id)
        if assignment is None or not assignment.is_active:
            return False

        assignment.soft_delete()
        await self.session.flush()
        return True

    # ============================================================
    # User -> Permission assignments
    # ============================================================

    async def get_user_permission(
        self, user_id: UUID, permission_id: UUID
    ) -> UserPermission | None:
        """Get a direct assignment row, active or revoked."""
        return await self.session.get(UserPermission, (user_id, permission_id))

    async def get_active_direct_permissions(self, user_id: UUID) -> list[Permission]:
        """Get the permissions currently assigned directly to a user."""
        stmt = (
            select(Permission)
            .join(UserPermission, UserPermission.permission_id == Permission.id)
            .where(
                UserPermission.user_id == user_id,
                UserPermission.deleted_at.is_(None),
            )
            .order_by(Permission.resource, Permission.action)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_user_permission_rows(self, user_id: UUID) -> list[UserPermission]:
        """Get every direct permission row of a user, including revoked ones."""
        stmt = (
            select(UserPermission)
            .where(UserPermission.user_id == user_id)
            .order_by(UserPermission.assigned_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def assign_permission(
        self,
        user_id: UUID,
        permission_id: UUID,
        assigned_by: UUID | None = None,
    ) -> UserPermission:
        """Assign a permission directly to a user.

        A previously revoked assignment is reactivated in place.
        """
        assignment = await self.get_user_permission(user_id, permission_id)
        if assignment is None:
            assignment = UserPermission(
                user_id=user_id,
                permission_id=permission_id,
                assigned_by=assigned_by,
            )
            self.session.add(assignment)
        else:
            assignment.reactivate(assigned_by)

        await self.session.flush()
        return assignment

    async def revoke_permission(self, user_id: UUID, permission_id: UUID) -> bool:
        """Soft-delete a user's direct permission assignment.

        Returns:
            True if an active assignment was revoked
        """
        assignment = await self.get_user_permission(user_id, permission_id)
        if assignment is None or not assignment.is_active:
            return False

        assignment.soft_delete()
        await self.session.flush()
        return True

    async def count_active_assignments(self, user_id: UUID) -> tuple[int, int]:
        """Count a user's active role and direct permission assignments."""
        roles = await self.session.execute(
            select(func.count())
            .select_from(UserRole)
            .where(UserRole.user_id == user_id, UserRole.deleted_at.is_(None))
        )
        permissions = await self.session.execute(
            select(func.count())
            .select_from(UserPermission)
            .where(UserPermission.user_id == user_id, UserPermission.deleted_at.is_(None))
        )
        return roles.scalar_one(), permissions.scalar_one()
