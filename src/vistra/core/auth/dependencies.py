"""FastAPI dependencies for authentication.

This module provides FastAPI dependency injection functions for:
- Extracting and validating bearer tokens
- Getting the current authenticated user
"""

from typing import Annotated, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vistra.api.dependencies import DBSession
from vistra.core.auth.backend import decode_token
from vistra.core.auth.schemas import TokenData
from vistra.core.errors import ForbiddenError, UnauthorizedError


# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_data(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenData:
    """Extract and validate token data from the Authorization header.

    Raises:
        UnauthorizedError: If token is missing or invalid
    """
    if not credentials:
        raise UnauthorizedError("Missing authentication token")

    token_data = decode_token(credentials.credentials)
    if not token_data or token_data.type != "access":
        raise UnauthorizedError("Invalid or expired token")

    return token_data


async def get_current_user(
    token_data: Annotated[TokenData, Depends(get_token_data)],
    db: DBSession,
) -> Any:  # Returns User, but use Any to avoid circular import
    """Get the currently authenticated user.

    Raises:
        UnauthorizedError: If the token's user no longer exists
        ForbiddenError: If the user is deactivated
    """
    from vistra.modules.users.repos import UserRepository  # noqa: PLC0415

    user = await UserRepository(db).get_by_id(token_data.user_id)

    if not user:
        raise UnauthorizedError("User not found")

    if not user.is_active:
        raise ForbiddenError(
            "User account is deactivated",
            error_code="user_inactive",
        )

    return user


# Use Any for User type to avoid circular imports at runtime
CurrentUser = Annotated[Any, Depends(get_current_user)]
