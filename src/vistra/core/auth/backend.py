"""Authentication backend for JWT and password handling.

Sessions are issued elsewhere; this service only verifies the bearer
access tokens it is handed. Token creation is kept for the seed script
and tests.
"""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from vistra.config import settings
from vistra.core.auth.schemas import TokenData
from vistra.core.constants import ACCESS_TOKEN_JTI_LENGTH, BCRYPT_ROUNDS


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def create_access_token(
    user_id: UUID,
    expires_delta: timedelta | None = None,
    additional_claims: dict[str, Any] | None = None,
) -> str:
    """Create a short-lived JWT access token.

    Args:
        user_id: The user's UUID
        expires_delta: Optional custom expiration time
        additional_claims: Optional extra claims to include

    Returns:
        Encoded JWT access token
    """
    now = datetime.now(UTC)
    expire = now + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )

    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        "exp": expire,
        "type": "access",
        "iat": now,
        "jti": secrets.token_urlsafe(ACCESS_TOKEN_JTI_LENGTH),
    }

    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> TokenData | None:
    """Decode and validate a JWT token.

    Args:
        token: The JWT token to decode

    Returns:
        TokenData if valid, None if invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )

        user_id = payload.get("sub")
        exp = payload.get("exp")

        if not user_id or exp is None:
            return None

        return TokenData(
            user_id=UUID(user_id),
            exp=datetime.fromtimestamp(exp, tz=UTC),
            type=payload.get("type", "access"),
        )

    except (JWTError, ValueError):
        return None
