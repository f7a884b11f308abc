"""
Unit tests for access tokens and auth dependencies.
"""
from datetime import timedelta

import jwt
import pytest
from fastapi.security import HTTPAuthorizationCredentials

from launchline.core.config import get_settings
from launchline.core.exceptions import AuthenticationException, AuthorizationException
from launchline.core.security import TokenError, create_access_token, decode_token, generate_secure_token
from launchline.modules.auth.dependencies import get_auth_context, require_roles
from launchline.modules.auth.schemas import AuthContext, UserRole


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestTokens:
    """Test JWT creation and verification."""

    def test_round_trip_keeps_claims(self):
        token = create_access_token({"sub": "user-1", "role": "WORKSPACE_ADMIN"})

        payload = decode_token(token)

        assert payload["sub"] == "user-1"
        assert payload["role"] == "WORKSPACE_ADMIN"
        assert payload["type"] == "access"
        assert payload["exp"] > payload["iat"]

    def test_expired_token_is_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-5))

        with pytest.raises(TokenError, match="expired"):
            decode_token(token)

    def test_foreign_signature_is_rejected(self):
        settings = get_settings()
        token = jwt.encode({"sub": "user-1", "type": "access"}, "another-secret", algorithm=settings.algorithm)

        with pytest.raises(TokenError, match="Invalid token"):
            decode_token(token)

    def test_non_access_token_is_rejected(self):
        settings = get_settings()
        token = jwt.encode({"sub": "user-1", "type": "refresh"}, settings.secret_key, algorithm=settings.algorithm)

        with pytest.raises(TokenError, match="type"):
            decode_token(token)

    def test_secure_token_length(self):
        assert len(generate_secure_token()) == 32
        assert len(generate_secure_token(8)) == 16


class TestGetAuthContext:
    """Test resolving the caller from the Authorization header."""

    async def test_valid_token_builds_context(self):
        token = create_access_token({
            "sub": "user-1",
            "role": "WORKSPACE_ADMIN",
            "email": "ada@acme.com",
            "name": "Ada",
        })

        context = await get_auth_context(bearer(token))

        assert context == AuthContext(
            user_id="user-1",
            role=UserRole.WORKSPACE_ADMIN,
            email="ada@acme.com",
            name="Ada",
        )

    async def test_missing_credentials(self):
        with pytest.raises(AuthenticationException):
            await get_auth_context(None)

    async def test_missing_subject(self):
        token = create_access_token({"role": "ADMIN"})

        with pytest.raises(AuthenticationException, match="Could not validate credentials"):
            await get_auth_context(bearer(token))

    async def test_invalid_token(self):
        with pytest.raises(AuthenticationException):
            await get_auth_context(bearer("garbage"))


class TestRequireRoles:
    """Test role gating."""

    async def test_allowed_role_passes_context_through(self):
        dependency = require_roles(UserRole.WORKSPACE_ADMIN, UserRole.ADMIN)
        auth = AuthContext(user_id="user-1", role=UserRole.ADMIN)

        assert await dependency(auth) is auth

    async def test_other_role_is_forbidden(self):
        dependency = require_roles(UserRole.WORKSPACE_ADMIN)

        with pytest.raises(AuthorizationException) as exc_info:
            await dependency(AuthContext(user_id="user-1", role=UserRole.WORKSPACE_MEMBER))

        assert exc_info.value.status_code == 403
