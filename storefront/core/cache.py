# storefront/core/cache.py
"""
Redis-backed session cache.

Key layout (two co-located key spaces in one redis database):

    session:token:<token>   -> JSON snapshot of the user (UserRead)
    session:user:<user_id>  -> <token>

Both keys of a session are written with the same TTL and are always
written/deleted in the same pipeline. Redis is not asked for MULTI/EXEC,
so the pair is best-effort rather than atomic: a failure of either
command is reported as CacheUnavailable and the caller treats the
session as unusable.

Expiry is delegated to redis; there is no sweeper.
"""

import logging
import uuid

import redis
from fastapi import Request
from pydantic import ValidationError

from storefront.core.config import Settings
from storefront.core.errors import CacheUnavailable
from storefront.schemas.user import UserRead

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "session:token:"
USER_PREFIX = "session:user:"


def create_redis_client(settings: Settings) -> redis.Redis:
    """
    Create the process-wide redis client.

    Connect and socket timeouts are kept short (1s by default) so a dead
    cache fails requests quickly instead of hanging them.
    """
    return redis.Redis.from_url(
        settings.REDIS_URL,
        socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT,
        socket_timeout=settings.REDIS_CONNECT_TIMEOUT,
        decode_responses=True,
    )


def _token_key(token: str) -> str:
    return f"{TOKEN_PREFIX}{token}"


def _user_key(user_id: uuid.UUID | str) -> str:
    return f"{USER_PREFIX}{user_id}"


class SessionCache:
    """
    Bidirectional token <-> user index with a shared TTL.

    Responsibilities:
      - store/lookup user snapshots by token
      - lookup the active token of a user (login reuse)
      - invalidate both directions on logout
      - translate every redis failure into CacheUnavailable
    """

    def __init__(self, client: redis.Redis, default_ttl: int):
        self.client = client
        self.default_ttl = default_ttl

    # ---- internal helpers ----

    @staticmethod
    def _raise_on_failures(results: list, op: str) -> None:
        failures = [r for r in results if isinstance(r, Exception)]
        if failures:
            logger.warning("Session cache %s failed: %s", op, failures)
            raise CacheUnavailable(f"{op} failed: {failures[0]}")

    # ---- public operations ----

    def put(self, token: str, user: UserRead, ttl: int | None = None) -> None:
        """
        Store token -> snapshot and user_id -> token, both expiring after
        `ttl` seconds.

        Any prior token of the same user is dropped in the same batch so
        no token -> user entry outlives its reverse mapping.
        """
        ttl = ttl or self.default_ttl
        user_key = _user_key(user.id)

        try:
            previous = self.client.get(user_key)

            pipe = self.client.pipeline(transaction=False)
            if previous and previous != token:
                pipe.delete(_token_key(previous))
            pipe.set(_token_key(token), user.model_dump_json(), ex=ttl)
            pipe.set(user_key, token, ex=ttl)
            results = pipe.execute(raise_on_error=False)
        except redis.RedisError as e:
            raise CacheUnavailable(str(e)) from e

        self._raise_on_failures(results, "put")

    def get_user(self, token: str) -> UserRead | None:
        """Return the snapshot for `token`, or None if absent/expired."""
        try:
            raw = self.client.get(_token_key(token))
        except redis.RedisError as e:
            raise CacheUnavailable(str(e)) from e

        if raw is None:
            return None

        try:
            return UserRead.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding corrupt session snapshot")
            return None

    def get_token(self, user_id: uuid.UUID | str) -> str | None:
        """Return the currently active token of a user, if any."""
        try:
            return self.client.get(_user_key(user_id))
        except redis.RedisError as e:
            raise CacheUnavailable(str(e)) from e

    def refresh_user(self, token: str, user: UserRead) -> bool:
        """
        Overwrite the snapshot of a live token, keeping its remaining TTL.

        Returns False if the token entry is already gone.
        """
        try:
            return bool(self.client.set(
                _token_key(token), user.model_dump_json(), keepttl=True, xx=True
            ))
        except redis.RedisError as e:
            raise CacheUnavailable(str(e)) from e

    def delete(self, token: str, user_id: uuid.UUID | str) -> None:
        """
        Remove both mappings of a session. Deleting a missing session is
        not an error.
        """
        try:
            pipe = self.client.pipeline(transaction=False)
            pipe.delete(_token_key(token))
            pipe.delete(_user_key(user_id))
            results = pipe.execute(raise_on_error=False)
        except redis.RedisError as e:
            raise CacheUnavailable(str(e)) from e

        self._raise_on_failures(results, "delete")

    def exists(self, token_or_user_id: uuid.UUID | str) -> bool:
        """
        True if either a token entry or a user entry exists under the given
        value.
        """
        value = str(token_or_user_id)
        try:
            return bool(self.client.exists(_token_key(value), _user_key(value)))
        except redis.RedisError as e:
            raise CacheUnavailable(str(e)) from e


def get_session_cache(request: Request) -> SessionCache:
    """FastAPI dependency: the SessionCache built in the app lifespan."""
    return request.app.state.session_cache
