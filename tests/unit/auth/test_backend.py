"""Unit tests for auth backend (JWT and password handling)."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from vistra.config import settings
from vistra.core.auth.backend import (
    create_access_token,
    decode_token,
    hash_password,
    pwd_context,
)


pytestmark = pytest.mark.unit


class TestPasswordHashing:
    """Tests for password hashing."""

    def test_hash_password_returns_bcrypt_hash(self):
        hashed = hash_password("mysecretpassword")

        assert hashed != "mysecretpassword"
        assert hashed.startswith("$2b$")
        assert pwd_context.verify("mysecretpassword", hashed)

    def test_hash_password_different_each_time(self):
        """Different due to random salt."""
        assert hash_password("mysecretpassword") != hash_password("mysecretpassword")


class TestJWTTokens:
    """Tests for JWT token functions."""

    def test_create_access_token_returns_jwt(self):
        token = create_access_token(uuid4())

        assert isinstance(token, str)
        assert token.count(".") == 2

    def test_decode_token_round_trip(self):
        user_id = uuid4()

        token_data = decode_token(create_access_token(user_id))

        assert token_data is not None
        assert token_data.user_id == user_id
        assert token_data.type == "access"

    def test_decode_token_expired(self):
        token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-1))

        assert decode_token(token) is None

    def test_decode_token_garbage(self):
        assert decode_token("not-a-token") is None

    def test_decode_token_wrong_secret(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "exp": 9999999999},
            "another-secret-that-is-long-enough-123",
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None

    def test_decode_token_without_subject(self):
        token = jwt.encode(
            {"exp": 9999999999},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None

    def test_additional_claims_are_kept(self):
        token = create_access_token(uuid4(), additional_claims={"type": "refresh"})

        token_data = decode_token(token)

        assert token_data is not None
        assert token_data.type == "refresh"
