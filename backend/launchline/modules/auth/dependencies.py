"""
Authentication dependencies.

Handlers receive an explicit ``AuthContext`` parameter; nothing reads the
current user from ambient request state.
"""
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from launchline.core.exceptions import AuthenticationException, AuthorizationException
from launchline.core.logger import get_logger
from launchline.core.metrics import record_token_validation
from launchline.core.security import TokenError, decode_token

from .schemas import AuthContext, UserRole

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthContext:
    """
    Resolve the caller's identity from the Authorization header.

    Raises:
        AuthenticationException: If the token is missing, invalid or expired
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationException()

    try:
        payload = decode_token(credentials.credentials)
        context = AuthContext(
            user_id=payload.get("sub"),
            role=payload.get("role"),
            email=payload.get("email"),
            name=payload.get("name"),
        )
    except (TokenError, ValidationError) as e:
        record_token_validation(success=False)
        logger.warning("Access token rejected", error=str(e))
        raise AuthenticationException("Could not validate credentials") from e

    record_token_validation(success=True)
    return context


def require_roles(*roles: UserRole) -> Callable:
    """
    Build a dependency admitting only callers with one of ``roles``.

    Example:
        @router.get("/workspace")
        async def get_workspace(auth: AuthContext = Depends(require_roles(UserRole.WORKSPACE_ADMIN))):
            ...
    """
    allowed = set(roles)

    async def dependency(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if auth.role not in allowed:
            logger.warning(
                "Role not permitted",
                user_id=auth.user_id,
                role=auth.role.value,
                allowed=[role.value for role in allowed],
            )
            raise AuthorizationException()
        return auth

    return dependency
