# storefront/core/auth.py
from fastapi import Depends
from fastapi.security import APIKeyHeader

from storefront.core.cache import SessionCache, get_session_cache
from storefront.core.config import Settings, get_settings
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import UserRead
from storefront.services.auth_service import AuthService

# Authorization header scheme:
# - auto_error=False => a missing header does not raise immediately, so
#   AuthService.resolve decides between Unauthenticated and Unauthorized.
# - clients may send the raw token returned by /login or "Bearer <token>".
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def get_auth_service(
    cache: SessionCache = Depends(get_session_cache),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(UserRepository(), cache, settings)


def get_token(header: str | None = Depends(authorization_header)) -> str | None:
    """Extract the token from the Authorization header."""
    if not header:
        return None
    header = header.strip()
    if header.lower().startswith("bearer "):
        header = header[7:].strip()
    return header or None


def require_auth(
    token: str | None = Depends(get_token),
    service: AuthService = Depends(get_auth_service),
) -> UserRead:
    """
    Enforce authentication.

    Resolves the request token through the session cache.

    Returns:
        The cached snapshot of the authenticated user.

    Raises:
        Unauthenticated(401): no token.
        Unauthorized(401): unknown, expired or logged-out token, or cache down.
    """
    return service.resolve(token)


def require_admin(user: UserRead = Depends(require_auth)) -> UserRead:
    """
    Enforce admin access (access_level >= 2).

    Raises:
        Forbidden(403): if the user is not an administrator.
    """
    AuthService.requires_admin(user)
    return user
