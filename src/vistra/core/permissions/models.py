"""Permission system database models.

This module defines the RBAC (Role-Based Access Control) models:
- Permission: An action that can be performed on a resource
- Role: A named set of permissions
- RolePermission: Hard link between a role and a permission
- UserRole: Soft-deletable assignment of a role to a user
- UserPermission: Soft-deletable direct assignment of a permission to a user
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from vistra.core.constants import (
    MAX_PERMISSION_NAME_LENGTH,
    MAX_PERMISSION_PART_LENGTH,
    MAX_ROLE_NAME_LENGTH,
)
from vistra.core.database.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDMixin,
    utcnow,
)


class Permission(Base, UUIDMixin, TimestampMixin):
    """Permission model representing an action on a resource.

    The ``name`` is the canonical "resource:action" string; ``resource``
    and ``action`` are its two halves. Either half may be ``*``.

    Examples:
        - name="users:read" -> Can view users
        - name="files:*" -> Any action on files
        - name="*:*" -> Everything
    """

    __tablename__ = "permissions"
    __table_args__ = (
        Index("ix_permissions_resource_action", "resource", "action"),
    )

    name: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_NAME_LENGTH),
        nullable=False,
        unique=True,
    )
    resource: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_PART_LENGTH),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_PART_LENGTH),
        nullable=False,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Permission({self.name})>"


class Role(Base, UUIDMixin, TimestampMixin):
    """Role model representing a named set of permissions.

    A user's effective permissions are the union of the permissions of
    all their active roles plus their active direct permissions.
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        nullable=False,
        unique=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name})>"


class RolePermission(Base):
    """Link table between roles and permissions.

    Links are created and removed outright; they carry no history.
    """

    __tablename__ = "role_permissions"

    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    permission_id: Mapped[UUID] = mapped_column(
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<RolePermission(role_id={self.role_id}, permission_id={self.permission_id})>"


class _AssignmentMixin(SoftDeleteMixin):
    """Columns shared by user role and user permission assignments."""

    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    assigned_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    def reactivate(self, assigned_by: UUID | None) -> None:
        """Bring a revoked assignment back into effect."""
        self.deleted_at = None
        self.assigned_at = utcnow()
        self.assigned_by = assigned_by


class UserRole(Base, _AssignmentMixin):
    """Assignment of a role to a user.

    Revoking sets ``deleted_at``; the row stays for the audit trail.
    """

    __tablename__ = "user_roles"
    __table_args__ = (
        Index("ix_user_roles_user_deleted", "user_id", "deleted_at"),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<UserRole(user_id={self.user_id}, role_id={self.role_id}, "
            f"deleted_at={self.deleted_at})>"
        )


class UserPermission(Base, _AssignmentMixin):
    """Direct assignment of a permission to a user.

    Same soft-delete semantics as UserRole.
    """

    __tablename__ = "user_permissions"
    __table_args__ = (
        Index("ix_user_permissions_user_deleted", "user_id", "deleted_at"),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    permission_id: Mapped[UUID] = mapped_column(
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<UserPermission(user_id={self.user_id}, "
            f"permission_id={self.permission_id}, deleted_at={self.deleted_at})>"
        )
