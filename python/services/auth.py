"""
Authentication dependencies for FastAPI.

Bearer tokens are JWTs issued by the external identity provider and
verified with python-jose against AUTH_JWT_SECRET. The token subject is
mapped to a local user row, which is created on first sight.

Usage:
    @router.get("/something")
    async def something(user: dict = Depends(require_user)):
        ...

    @router.post("/owner-only")
    async def owner_only(user: dict = Depends(require_role("gym_owner", "admin"))):
        ...
"""

from typing import Optional

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from core.config import settings
from core.exceptions import AuthenticationError, InvalidTokenError, InsufficientPermissionsError
from core.logging import get_logger

logger = get_logger(__name__)

# === Security schemes ===
security_optional = HTTPBearer(auto_error=False)

# Users repository (set by main.py on startup)
users_repo_instance = None


def set_services(users_repo):
    """Inject the users repository. Called from main.py during startup."""
    global users_repo_instance
    users_repo_instance = users_repo


def decode_token(token: str) -> dict:
    """
    Verify a provider JWT and return its claims.

    Raises:
        AuthenticationError if the server has no signing secret
        InvalidTokenError if the token is malformed, expired or has no subject
    """
    if not settings.auth_jwt_secret:
        logger.error("AUTH_JWT_SECRET not configured!")
        raise AuthenticationError("Authentication not configured on server")

    options = {"verify_aud": False}
    kwargs = {}
    if settings.auth_jwt_issuer:
        kwargs["issuer"] = settings.auth_jwt_issuer

    try:
        claims = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            options=options,
            **kwargs,
        )
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        raise InvalidTokenError()

    if not claims.get("sub"):
        raise InvalidTokenError()
    return claims


async def sync_user(claims: dict) -> dict:
    """
    Find the local user for token claims, creating a `user` row if new.

    Raises:
        AuthenticationError if the account is blocked
    """
    provider_id = claims["sub"]
    user = await users_repo_instance.get_by_provider_id(provider_id)

    if user is None:
        # upsert: parallel first requests of one login all get the same row
        user = await users_repo_instance.create_from_identity(
            provider_id=provider_id,
            email=claims.get("email"),
            phone=claims.get("phone_number"),
            name=claims.get("name") or "User",
            profile_image=claims.get("picture"),
        )
        logger.info(f"Synced user {user['id']} for provider id {provider_id}")

    if not user.get("is_active", True):
        logger.warning(f"Blocked user {user['id']} attempted access")
        raise AuthenticationError("Account is blocked")
    return user


async def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security_optional)
) -> dict:
    """
    Require a valid token and return the local user row.

    Raises:
        AuthenticationError (401) without a token, with a bad one, or for a blocked user
    """
    if credentials is None:
        raise AuthenticationError()
    claims = decode_token(credentials.credentials)
    return await sync_user(claims)


async def optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security_optional)
) -> Optional[dict]:
    """
    Current user if a valid token for an active account is present, None otherwise.
    Never creates users and never fails.
    """
    if credentials is None:
        return None
    try:
        claims = decode_token(credentials.credentials)
    except AuthenticationError:
        return None
    return await users_repo_instance.get_active_by_provider_id(claims["sub"])


def require_role(*roles: str):
    """Dependency factory: the current user must have one of `roles`."""

    async def dependency(user: dict = Depends(require_user)) -> dict:
        if user.get("role") not in roles:
            logger.warning(f"User {user.get('id')} with role {user.get('role')} denied (needs {roles})")
            raise InsufficientPermissionsError(message="Access denied. Insufficient permissions.")
        return user

    return dependency


require_admin = require_role("admin")
require_gym_admin = require_role("gym_owner", "admin")
