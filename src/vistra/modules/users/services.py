"""User business logic services.

``UserService`` handles the account lifecycle; ``UserAccessService``
handles a user's role and direct permission grants. Both refuse to
touch system accounts and record what they did in the activity log.
"""

from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends

from vistra.api.dependencies import DBSession
from vistra.core.auth.backend import hash_password
from vistra.core.errors import (
    BadRequestError,
    ConflictError,
    PermissionNotFoundError,
    RoleNotFoundError,
    UserNotFoundError,
)
from vistra.core.permissions.cache import PermissionCacheDep
from vistra.core.permissions.catalog import PermissionCatalog
from vistra.core.permissions.models import Role
from vistra.core.permissions.protection import AccountMutation, ensure_not_system_account
from vistra.core.permissions.repos import GrantRepository
from vistra.core.permissions.resolver import PermissionResolver
from vistra.modules.activities.services import ActivityLogger
from vistra.modules.users.models import User
from vistra.modules.users.repos import UserRepository
from vistra.modules.users.schemas import (
    PermissionSummary,
    RoleSummary,
    UserAccessResponse,
    UserCreate,
    UserUpdate,
)


logger = structlog.get_logger()


class UserService:
    """Service for user account operations."""

    def __init__(self, session: DBSession, cache: PermissionCacheDep) -> None:
        self.session = session
        self.repo = UserRepository(session)
        self.grants = GrantRepository(session)
        self.resolver = PermissionResolver(session, cache=cache)
        self.activities = ActivityLogger(session)

    async def get_user(self, user_id: UUID) -> User:
        """Get a user by ID.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.repo.get_by_id(user_id)
        if not user:
            raise UserNotFoundError(user_id)
        return user

    async def list_users(self, page: int, page_size: int) -> tuple[list[User], int]:
        return await self.repo.list_users(page=page, page_size=page_size)

    async def get_access(self, user_id: UUID) -> UserAccessResponse:
        """Collect a user's roles, direct and effective permissions."""
        roles = await self.grants.get_active_roles(user_id)
        direct = await self.grants.get_active_direct_permissions(user_id)
        effective = await self.resolver.resolve_effective_permissions(user_id)

        return UserAccessResponse(
            roles=[RoleSummary.model_validate(role) for role in roles],
            direct_permissions=[PermissionSummary.model_validate(p) for p in direct],
            permissions=[
                PermissionSummary.model_validate(p)
                for p in sorted(effective, key=lambda p: (p.resource, p.action))
            ],
        )

    async def create_user(self, data: UserCreate, actor_id: UUID | None = None) -> User:
        """Create a new user account.

        Raises:
            ConflictError: If the email is already taken
        """
        await self._ensure_email_available(data.email)

        user = await self.repo.create(
            User(
                email=data.email,
                name=data.name,
                password_hash=hash_password(data.password),
            )
        )

        await self.activities.log(
            action="create",
            resource_type="user",
            resource_id=user.id,
            description=f"User created: {user.email}",
            metadata={"email": user.email, "name": user.name},
            user_id=actor_id,
        )
        logger.info("user_created", user_id=str(user.id), email=user.email)
        return user

    async def update_user(
        self, user_id: UUID, data: UserUpdate, actor_id: UUID | None = None
    ) -> User:
        """Update a user's email and/or name.

        Raises:
            UserNotFoundError: If the user does not exist
            CannotModifySystemAccountError: If the user is a system account
            ConflictError: If the new email is already taken
        """
        user = await self.get_user(user_id)
        ensure_not_system_account(user, AccountMutation.UPDATE)

        previous: dict[str, Any] = {"email": user.email, "name": user.name}
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in changes and changes["email"] != user.email:
            await self._ensure_email_available(changes["email"])

        for field, value in changes.items():
            setattr(user, field, value)
        user = await self.repo.update(user)

        await self.activities.log(
            action="update",
            resource_type="user",
            resource_id=user.id,
            description=f"User updated: {user.email}",
            metadata={
                "email": user.email,
                "name": user.name,
                "previous_email": previous["email"],
                "previous_name": previous["name"],
            },
            user_id=actor_id,
        )
        return user

    async def delete_user(self, user_id: UUID, actor_id: UUID | None = None) -> None:
        """Delete a user account.

        Raises:
            UserNotFoundError: If the user does not exist
            BadRequestError: If the caller tries to delete themselves
            CannotDeleteSystemAccountError: If the user is a system account
        """
        user = await self.get_user(user_id)

        if actor_id is not None and user.id == actor_id:
            raise BadRequestError(
                "You cannot delete your own account",
                error_code="cannot_delete_self",
            )

        ensure_not_system_account(user, AccountMutation.DELETE)

        email, name = user.email, user.name
        await self.repo.delete(user)

        await self.activities.log(
            action="delete",
            resource_type="user",
            resource_id=user_id,
            description=f"User deleted: {email}",
            metadata={"email": email, "name": name},
            user_id=actor_id,
        )
        logger.info("user_deleted", user_id=str(user_id))

    async def _ensure_email_available(self, email: str) -> None:
        if await self.repo.get_by_email(email):
            raise ConflictError(
                "User with this email already exists",
                error_code="email_already_exists",
                details={"email": email},
            )


class UserAccessService:
    """Service for assigning and revoking a user's roles and permissions.

    Every change invalidates the user's entry in the request's
    permission cache so later checks in the same request see it.
    """

    def __init__(self, session: DBSession, cache: PermissionCacheDep) -> None:
        self.session = session
        self.cache = cache
        self.users = UserService(session, cache)
        self.grants = GrantRepository(session)
        self.catalog = PermissionCatalog(session)
        self.activities = ActivityLogger(session)

    async def _get_target(self, user_id: UUID, mutation: AccountMutation) -> User:
        user = await self.users.get_user(user_id)
        ensure_not_system_account(user, mutation)
        return user

    async def _get_role(self, role_id: UUID) -> Role:
        role = await self.session.get(Role, role_id)
        if not role:
            raise RoleNotFoundError(role_id)
        return role

    async def assign_role(
        self, user_id: UUID, role_id: UUID, actor_id: UUID | None = None
    ) -> UserAccessResponse:
        """Assign a role to a user, reactivating a revoked assignment.

        Raises:
            UserNotFoundError: If the user does not exist
            CannotModifySystemAccountRolesError: If the user is a system account
            RoleNotFoundError: If the role does not exist
        """
        user = await self._get_target(user_id, AccountMutation.ROLES)
        role = await self._get_role(role_id)

        await self.grants.assign_role(user.id, role.id, assigned_by=actor_id)
        self.cache.invalidate(user.id)

        await self.activities.log(
            action="assign_role",
            resource_type="user_role",
            resource_id=user.id,
            description=f"Role assigned to user: {user.email} (role: {role.name})",
            metadata={
                "user_email": user.email,
                "role_id": str(role.id),
                "role_name": role.name,
            },
            user_id=actor_id,
        )
        logger.info("role_assigned", user_id=str(user.id), role_id=str(role.id))
        return await self.users.get_access(user.id)

    async def revoke_role(
        self, user_id: UUID, role_id: UUID, actor_id: UUID | None = None
    ) -> UserAccessResponse:
        """Revoke a role from a user.

        The assignment row is kept with ``deleted_at`` set. Revoking a role
        the user does not hold is a no-op.
        """
        user = await self._get_target(user_id, AccountMutation.ROLES)

        revoked = await self.grants.revoke_role(user.id, role_id)
        self.cache.invalidate(user.id)

        if revoked:
            role = await self.session.get(Role, role_id)
            await self.activities.log(
                action="remove_role",
                resource_type="user_role",
                resource_id=user.id,
                description=(
                    f"Role removed from user: {user.email} "
                    f"(role: {role.name if role else role_id})"
                ),
                metadata={
                    "user_email": user.email,
                    "role_id": str(role_id),
                    "role_name": role.name if role else None,
                },
                user_id=actor_id,
            )
            logger.info("role_revoked", user_id=str(user.id), role_id=str(role_id))

        return await self.users.get_access(user.id)

    async def assign_permission(
        self, user_id: UUID, permission_id: UUID, actor_id: UUID | None = None
    ) -> UserAccessResponse:
        """Grant a permission directly to a user.

        Raises:
            UserNotFoundError: If the user does not exist
            CannotModifySystemAccountPermissionsError: If the user is a system account
            PermissionNotFoundError: If the permission does not exist
        """
        user = await self._get_target(user_id, AccountMutation.PERMISSIONS)
        permission = await self.catalog.get_permission(permission_id)
        if not permission:
            raise PermissionNotFoundError(permission_id)

        await self.grants.assign_permission(user.id, permission.id, assigned_by=actor_id)
        self.cache.invalidate(user.id)

        await self.activities.log(
            action="assign_permission",
            resource_type="user_permission",
            resource_id=user.id,
            description=(
                f"Permission assigned to user: {user.email} "
                f"(permission: {permission.name})"
            ),
            metadata={
                "user_email": user.email,
                "permission_id": str(permission.id),
                "permission_name": permission.name,
            },
            user_id=actor_id,
        )
        logger.info(
            "permission_assigned",
            user_id=str(user.id),
            permission=permission.name,
        )
        return await self.users.get_access(user.id)

    async def revoke_permission(
        self, user_id: UUID, permission_id: UUID, actor_id: UUID | None = None
    ) -> UserAccessResponse:
        """Revoke a direct permission from a user (soft delete, idempotent)."""
        user = await self._get_target(user_id, AccountMutation.PERMISSIONS)

        revoked = await self.grants.revoke_permission(user.id, permission_id)
        self.cache.invalidate(user.id)

        if revoked:
            permission = await self.catalog.get_permission(permission_id)
            name = permission.name if permission else None
            await self.activities.log(
                action="remove_permission",
                resource_type="user_permission",
                resource_id=user.id,
                description=(
                    f"Permission removed from user: {user.email} "
                    f"(permission: {name or permission_id})"
                ),
                metadata={
                    "user_email": user.email,
                    "permission_id": str(permission_id),
                    "permission_name": name,
                },
                user_id=actor_id,
            )
            logger.info(
                "permission_revoked",
                user_id=str(user.id),
                permission_id=str(permission_id),
            )

        return await self.users.get_access(user.id)


# Type aliases for dependency injection
UserSvc = Annotated[UserService, Depends(UserService)]
UserAccessSvc = Annotated[UserAccessService, Depends(UserAccessService)]
