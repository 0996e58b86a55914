"""Authentication schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr


class TokenData(BaseModel):
    """Data extracted from a JWT token.

    Attributes:
        user_id: The user's UUID
        exp: Token expiration time
        type: Token type
    """

    user_id: UUID
    exp: datetime
    type: str = "access"


class CurrentUserResponse(BaseModel):
    """The authenticated user and what they are allowed to do."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: EmailStr
    name: str
    is_system_account: bool
    permissions: list[str]
