"""Pydantic schemas for user operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from vistra.core.constants import MAX_NAME_LENGTH, MAX_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH


# ============================================================
# Request Schemas
# ============================================================


class UserCreate(BaseModel):
    """Schema for creating a user."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )


class UserUpdate(BaseModel):
    """Schema for updating a user's profile."""

    email: EmailStr | None = None
    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)


class AssignRoleRequest(BaseModel):
    role_id: UUID


class AssignPermissionRequest(BaseModel):
    permission_id: UUID


# ============================================================
# Response Schemas
# ============================================================


class RoleSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None


class PermissionSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    resource: str
    action: str


class UserResponse(BaseModel):
    """Schema for user response data. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: EmailStr
    name: str
    is_system_account: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserAccessResponse(BaseModel):
    """A user's roles, direct permissions and effective permissions."""

    roles: list[RoleSummary]
    direct_permissions: list[PermissionSummary]
    permissions: list[PermissionSummary]


class UserDetailResponse(UserResponse, UserAccessResponse):
    """A user together with everything they have been granted."""


class UserListResponse(BaseModel):
    """Paginated list of users."""

    items: list[UserResponse]
    total: int
    page: int
    page_size: int
