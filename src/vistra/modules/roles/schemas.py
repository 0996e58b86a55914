"""Pydantic schemas for role operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from vistra.core.constants import MAX_ROLE_NAME_LENGTH


class RoleCreate(BaseModel):
    """Schema for creating a role.

    ``permissions`` are permission names; unknown names are added to the
    catalog, malformed names reject the whole request.
    """

    name: str = Field(..., min_length=1, max_length=MAX_ROLE_NAME_LENGTH)
    description: str | None = None
    permissions: list[str] | None = None


class RoleUpdate(BaseModel):
    """Schema for updating a role.

    When ``permissions`` is given it replaces the role's permission set.
    """

    name: str | None = Field(None, min_length=1, max_length=MAX_ROLE_NAME_LENGTH)
    description: str | None = None
    permissions: list[str] | None = None


class RolePermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    resource: str
    action: str
    description: str | None = None


class RoleResponse(BaseModel):
    """A role with its permissions."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime
    permissions: list[RolePermissionResponse] = []
