"""Role business logic.

Creating or updating a role with a permission list is all-or-nothing:
every name is validated before anything is written, and the writes run
inside one savepoint.
"""

from collections.abc import Sequence
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from vistra.api.dependencies import DBSession
from vistra.core.errors import ConflictError, InvalidPermissionFormatError, RoleNotFoundError
from vistra.core.permissions.cache import PermissionCacheDep
from vistra.core.permissions.catalog import PermissionCatalog
from vistra.core.permissions.checker import AccessPolicy, PermissionChecker
from vistra.core.permissions.models import Permission, Role
from vistra.core.permissions.names import find_invalid_permission_names
from vistra.core.permissions.repos import GrantRepository
from vistra.core.permissions.resolver import PermissionResolver
from vistra.modules.activities.services import ActivityLogger
from vistra.modules.roles.repos import RoleRepository
from vistra.modules.roles.schemas import RoleCreate, RoleUpdate


logger = structlog.get_logger()

# Changing a role's permissions also requires one of these, verbatim
MANAGE_PERMISSIONS_POLICY = AccessPolicy(any_of=("permissions:*", "permissions:write"))


class RoleService:
    """Service for role operations."""

    def __init__(self, session: DBSession, cache: PermissionCacheDep) -> None:
        self.session = session
        self.cache = cache
        self.repo = RoleRepository(session)
        self.grants = GrantRepository(session)
        self.catalog = PermissionCatalog(session)
        self.checker = PermissionChecker(PermissionResolver(session, cache=cache))
        self.activities = ActivityLogger(session)

    async def get_role(self, role_id: UUID) -> Role:
        """Get a role by ID.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        role = await self.repo.get_by_id(role_id)
        if not role:
            raise RoleNotFoundError(role_id)
        return role

    async def get_role_permissions(self, role_id: UUID) -> list[Permission]:
        return await self.grants.get_role_permissions(role_id)

    async def list_roles(self) -> list[tuple[Role, list[Permission]]]:
        """List roles, each with its permissions."""
        roles = await self.repo.list_roles()
        by_role = await self.grants.get_permissions_for_roles([role.id for role in roles])
        return [(role, by_role[role.id]) for role in roles]

    async def create_role(self, data: RoleCreate, actor_id: UUID) -> Role:
        """Create a role, optionally with permissions.

        Raises:
            ForbiddenError: If permissions are given and the caller may not manage them
            InvalidPermissionFormatError: If any permission name is malformed
            ConflictError: If the role name is taken
        """
        if data.permissions:
            await self.checker.require(actor_id, MANAGE_PERMISSIONS_POLICY)
            self._validate_names(data.permissions)

        await self._ensure_name_available(data.name)

        try:
            async with self.session.begin_nested():
                role = await self.repo.create(
                    Role(name=data.name, description=data.description)
                )
                if data.permissions:
                    await self._link_permissions(role, data.permissions)
        except IntegrityError as exc:
            raise self._name_conflict(data.name) from exc

        await self.activities.log(
            action="create",
            resource_type="role",
            resource_id=role.id,
            description=f"Role created: {role.name}",
            metadata={
                "role_name": role.name,
                "role_description": role.description,
                "permissions": data.permissions or [],
            },
            user_id=actor_id,
        )
        logger.info("role_created", role_id=str(role.id), name=role.name)
        return role

    async def update_role(self, role_id: UUID, data: RoleUpdate, actor_id: UUID) -> Role:
        """Update a role's name, description and/or permission set.

        A supplied ``permissions`` list, even an empty one, replaces the
        role's permissions.

        Raises:
            RoleNotFoundError: If the role does not exist
            ForbiddenError: If permissions are given and the caller may not manage them
            InvalidPermissionFormatError: If any permission name is malformed
            ConflictError: If the new name is taken
        """
        role = await self.get_role(role_id)

        if data.permissions is not None:
            await self.checker.require(actor_id, MANAGE_PERMISSIONS_POLICY)
            self._validate_names(data.permissions)

        if data.name is not None and data.name != role.name:
            await self._ensure_name_available(data.name)

        previous = {"name": role.name, "description": role.description}

        try:
            async with self.session.begin_nested():
                if data.name is not None:
                    role.name = data.name
                if "description" in data.model_fields_set:
                    role.description = data.description
                await self.repo.update(role)

                if data.permissions is not None:
                    await self.grants.clear_role_permissions(role.id)
                    await self._link_permissions(role, data.permissions)
        except IntegrityError as exc:
            raise self._name_conflict(data.name or previous["name"]) from exc

        if data.permissions is not None:
            # Every holder of the role is affected
            self.cache.clear()

        await self.activities.log(
            action="update",
            resource_type="role",
            resource_id=role.id,
            description=f"Role updated: {role.name}",
            metadata={
                "role_name": role.name,
                "previous_name": previous["name"],
                "previous_description": previous["description"],
                "permissions": data.permissions,
            },
            user_id=actor_id,
        )
        logger.info("role_updated", role_id=str(role.id), name=role.name)
        return role

    async def delete_role(self, role_id: UUID, actor_id: UUID) -> None:
        """Delete a role and, through cascades, its links and assignments.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        role = await self.get_role(role_id)
        name = role.name

        await self.repo.delete(role)
        self.cache.clear()

        await self.activities.log(
            action="delete",
            resource_type="role",
            resource_id=role_id,
            description=f"Role deleted: {name}",
            metadata={"role_name": name},
            user_id=actor_id,
        )
        logger.info("role_deleted", role_id=str(role_id), name=name)

    @staticmethod
    def _validate_names(names: Sequence[str]) -> None:
        invalid = find_invalid_permission_names(names)
        if invalid:
            raise InvalidPermissionFormatError(invalid)

    async def _link_permissions(self, role: Role, names: Sequence[str]) -> None:
        for name in dict.fromkeys(names):
            permission = await self.catalog.get_or_create_permission(name)
            await self.grants.add_permission_to_role(role.id, permission.id)

    async def _ensure_name_available(self, name: str) -> None:
        if await self.repo.get_by_name(name):
            raise self._name_conflict(name)

    @staticmethod
    def _name_conflict(name: str) -> ConflictError:
        return ConflictError(
            "Role with this name already exists",
            error_code="role_already_exists",
            details={"name": name},
        )


RoleSvc = Annotated[RoleService, Depends(RoleService)]
