"""Password hashing and session token creation/verification."""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
import jwt

from lumasms.core.config import settings

# Length limits for credential validation (checked by the authentication service).
USERNAME_MAX_LEN = 255
EMAIL_MAX_LEN = 255
PASSWORD_MAX_LEN = 128

# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72


def _password_bytes(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    cost = rounds if rounds is not None else settings.BCRYPT_ROUNDS
    return bcrypt.hashpw(
        _password_bytes(plain_password), bcrypt.gensalt(rounds=cost)
    ).decode("utf-8")


@lru_cache
def _dummy_hash(rounds: int) -> bytes:
    """Digest used to spend a full comparison when there is no real digest to check."""
    return bcrypt.hashpw(b"lumasms-dummy-password", bcrypt.gensalt(rounds=rounds))


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """
    Verify a plain password against a stored hash.

    A missing, empty, or malformed digest never verifies. In that case a comparison
    against a dummy digest of the configured cost still runs, so unknown users and
    empty-hash users take about as long as a wrong password.
    """
    pw_bytes = _password_bytes(plain_password or "")
    if not hashed:
        bcrypt.checkpw(pw_bytes, _dummy_hash(settings.BCRYPT_ROUNDS))
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        bcrypt.checkpw(pw_bytes, _dummy_hash(settings.BCRYPT_ROUNDS))
        return False


def create_session_token(uid: int, username: str) -> str:
    """Create a signed session token with sub (user id), username, exp and iat."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(uid),
        "username": username,
        "exp": expire,
        "iat": now,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_session_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a session token; return payload (sub, username, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
    )
