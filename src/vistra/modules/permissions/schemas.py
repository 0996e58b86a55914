"""Pydantic schemas for the permission catalog."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class PermissionCreate(BaseModel):
    """Schema for adding a permission to the catalog.

    The name is validated by the catalog, so a malformed name yields
    ``invalid_permission_format`` rather than a generic 422.
    """

    name: str
    description: str | None = None


class PermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    resource: str
    action: str
    description: str | None
    created_at: datetime
