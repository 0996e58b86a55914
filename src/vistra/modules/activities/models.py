"""Activity log database model.

Append-only record of admin actions: who did what to which resource.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from vistra.core.constants import MAX_ACTIVITY_ACTION_LENGTH, MAX_RESOURCE_TYPE_LENGTH
from vistra.core.database.base import Base, UUIDMixin, utcnow


class Activity(Base, UUIDMixin):
    """Activity entry.

    Attributes:
        user_id: The user who performed the action (nullable once deleted)
        action: Type of action (create, update, delete, assign_role, ...)
        resource_type: Type of resource affected (user, role, permission)
        resource_id: ID of the affected resource
        description: Human-readable summary
        metadata_: Additional context about the action
        created_at: When the action occurred
    """

    __tablename__ = "activities"

    user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action: Mapped[str] = mapped_column(
        String(MAX_ACTIVITY_ACTION_LENGTH),
        nullable=False,
        index=True,
    )
    resource_type: Mapped[str] = mapped_column(
        String(MAX_RESOURCE_TYPE_LENGTH),
        nullable=False,
        index=True,
    )
    resource_id: Mapped[UUID | None] = mapped_column(
        nullable=True,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata",  # Column name in database
        JSON().with_variant(JSONB, "postgresql"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Activity(id={self.id}, action={self.action}, "
            f"resource_type={self.resource_type}, resource_id={self.resource_id})>"
        )
