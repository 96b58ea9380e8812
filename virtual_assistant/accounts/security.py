"""
Password hashing and session tokens.
"""

import base64
import hashlib
import hmac
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

logger = logging.getLogger(__name__)

_PBKDF2_ROUNDS = 200_000
_ALGORITHM = "HS256"


class TokenError(Exception):
    """Session token is missing, expired or malformed."""


def hash_password(password: str) -> str:
    """Hash a password as ``pbkdf2_sha256$rounds$salt$digest``."""
    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, _PBKDF2_ROUNDS)
    return "pbkdf2_sha256${}${}${}".format(
        _PBKDF2_ROUNDS,
        base64.b64encode(salt).decode(),
        base64.b64encode(digest).decode(),
    )


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against a hash from hash_password()."""
    try:
        scheme, rounds, salt_b64, digest_b64 = encoded.split("$")
    except ValueError:
        return False
    if scheme != "pbkdf2_sha256":
        return False

    salt = base64.b64decode(salt_b64)
    expected = base64.b64decode(digest_b64)
    actual = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, int(rounds))
    return hmac.compare_digest(actual, expected)


def issue_token(user_id: str, secret: str, expires_days: int = 10, now: Optional[datetime] = None) -> str:
    """
    Issue a signed session token carrying the user id.

    Raises:
        ValueError: If no signing secret is configured
    """
    if not secret:
        raise ValueError("JWT secret is not configured. Set VIRTUAL_ASSISTANT_JWT_SECRET.")
    now = now or datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "iat": now,
        "exp": now + timedelta(days=expires_days),
    }
    return jwt.encode(payload, secret, algorithm=_ALGORITHM)


def read_token(token: str, secret: str) -> str:
    """
    Validate a token and return its user id.

    Raises:
        TokenError: If the token is invalid, expired or has no user id
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[_ALGORITHM])
    except jwt.PyJWTError as e:
        raise TokenError(str(e)) from e

    user_id = payload.get("userId")
    if not user_id:
        raise TokenError("invalid token payload")
    return user_id
