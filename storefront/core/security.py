# storefront/core/security.py
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt, JWTError
from passlib.context import CryptContext

from storefront.core.config import Settings

# pbkdf2_sha256 is pure-python in passlib, no external bcrypt backend needed.
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    """
    Hash a plain-text password (salted, one-way).
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a candidate password against a stored hash.
    """
    return pwd_context.verify(plain_password, hashed)


def create_access_token(user_id: uuid.UUID, settings: Settings) -> str:
    """
    Mint a signed session token.

    Claims:
      - sub: user id
      - jti: 128 bits of randomness, so two tokens for the same user never
             collide even within the same second
      - exp: now + AUTH_TOKEN_TTL

    The signature only makes tokens unguessable; the session cache stays
    the authority on whether a token is live.
    """
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "jti": secrets.token_hex(16),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=settings.AUTH_TOKEN_TTL)).timestamp()),
    }
    return jwt.encode(claims, settings.AUTH_SECRET, algorithm=settings.AUTH_ALG)


def decode_access_token(token: str, settings: Settings) -> dict[str, Any] | None:
    """
    Decode and verify a session token.

    Returns:
        Decoded claims, or None if the signature/expiry check fails.
    """
    try:
        return jwt.decode(token, settings.AUTH_SECRET, algorithms=[settings.AUTH_ALG])
    except JWTError:
        return None
