"""Authentication: bearer token verification and the current user."""

from vistra.core.auth.backend import create_access_token, decode_token, hash_password
from vistra.core.auth.dependencies import CurrentUser, get_current_user
from vistra.core.auth.middleware import RequestIdMiddleware, SessionContextMiddleware
from vistra.core.auth.routes import router as auth_router
from vistra.core.auth.schemas import CurrentUserResponse, TokenData


__all__ = [
    "CurrentUser",
    "CurrentUserResponse",
    "RequestIdMiddleware",
    "SessionContextMiddleware",
    "TokenData",
    "auth_router",
    "create_access_token",
    "decode_token",
    "get_current_user",
    "hash_password",
]
