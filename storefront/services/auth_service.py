# storefront/services/auth_service.py
import logging
import uuid

from sqlmodel import Session

from storefront.core.cache import SessionCache
from storefront.core.config import Settings
from storefront.core.errors import (
    CacheUnavailable,
    Conflict,
    Forbidden,
    NotFound,
    Unauthenticated,
    Unauthorized,
    Unexpected,
)
from storefront.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import LoginRequest, RegisterRequest, UserRead

logger = logging.getLogger(__name__)

ADMIN_ACCESS_LEVEL = 2


class AuthService:
    """
    Registration, login, logout and token resolution.

    Session lifecycle per token:
        absent -> active (login) -> absent (logout or TTL expiry)

    A user has at most one live session: a second login before the TTL
    runs out hands back the same token instead of minting a new one.
    """

    def __init__(self, repo: UserRepository, cache: SessionCache, settings: Settings):
        self.repo = repo
        self.cache = cache
        self.settings = settings

    # ----- Registration -----

    def register(self, session: Session, payload: RegisterRequest) -> User:
        """
        Create a new account with access_level=1 and an empty cart.

        Raises:
            Conflict: if email or username is already taken.
        """
        if self.repo.get_by_email(session, payload.email):
            raise Conflict("Email already in use")

        if self.repo.get_by_username(session, payload.username):
            raise Conflict("Username already in use")

        user = User(
            email=payload.email,
            username=payload.username,
            password_hash=hash_password(payload.password),
        )
        user = self.repo.create(session, user)
        logger.info("Registered user %s", user.id)
        return user

    # ----- Login / logout -----

    def login(self, session: Session, payload: LoginRequest) -> tuple[str, UserRead]:
        """
        Verify credentials and return (token, user snapshot).

        Rules:
          - unknown email => NotFound
          - wrong password => Unauthorized, no token issued
          - live token for this user => reused (its snapshot is refreshed)
          - otherwise a new token is minted and cached for AUTH_TOKEN_TTL
        """
        user = self.repo.get_by_email(session, payload.email)
        if not user:
            raise NotFound("User not found")

        if not verify_password(payload.password, user.password_hash):
            raise Unauthorized("Invalid password")

        snapshot = UserRead.model_validate(user)

        try:
            token = self.cache.get_token(user.id)
            if token and self.cache.refresh_user(token, snapshot):
                return token, snapshot

            token = create_access_token(user.id, self.settings)
            self.cache.put(token, snapshot, self.settings.AUTH_TOKEN_TTL)
        except CacheUnavailable as e:
            logger.error("Login failed, session cache unavailable: %s", e)
            raise Unexpected()

        return token, snapshot

    def logout(self, token: str, user_id: uuid.UUID) -> None:
        """
        Invalidate both mappings of the session. Logging out an already
        invalidated session is a no-op.
        """
        try:
            self.cache.delete(token, user_id)
        except CacheUnavailable as e:
            logger.error("Logout failed, session cache unavailable: %s", e)
            raise Unexpected()

    # ----- Token resolution -----

    def resolve(self, token: str | None) -> UserRead:
        """
        Resolve a bearer token to the cached user snapshot.

        Raises:
            Unauthenticated: no token on the request.
            Unauthorized: token malformed, never issued, expired, logged out,
                          or the cache is unreachable (fail closed).
        """
        if not token:
            raise Unauthenticated()

        if decode_access_token(token, self.settings) is None:
            raise Unauthorized()

        try:
            user = self.cache.get_user(token)
        except CacheUnavailable as e:
            logger.warning("Treating request as unauthenticated, cache unavailable: %s", e)
            raise Unauthorized()

        if user is None:
            raise Unauthorized()
        return user

    def exists(self, token_or_user_id: uuid.UUID | str) -> bool:
        """Whether any session entry is still stored under this token/user id."""
        return self.cache.exists(token_or_user_id)

    # ----- Capabilities -----

    @staticmethod
    def requires_admin(user: UserRead | User) -> None:
        """
        Raises:
            Forbidden: unless user.access_level >= 2.
        """
        if user.access_level < ADMIN_ACCESS_LEVEL:
            raise Forbidden()

    @staticmethod
    def can_manage(actor: UserRead | User, owner_id: uuid.UUID) -> bool:
        """True if `actor` owns the resource or is an administrator."""
        return actor.id == owner_id or actor.access_level >= ADMIN_ACCESS_LEVEL
