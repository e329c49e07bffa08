"""Password hashing and JWT creation/verification for authentication."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from campus_pulse.core.config import Settings

# Upper bounds for username and password input.
USERNAME_MAX_LEN = 255
PASSWORD_MAX_LEN = 128

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried inside an access token."""

    user_id: int
    username: str
    role: str


@dataclass(frozen=True)
class TokenValid:
    claims: TokenClaims


@dataclass(frozen=True)
class TokenExpired:
    pass


@dataclass(frozen=True)
class TokenInvalid:
    reason: str = "invalid"


TokenResult = TokenValid | TokenExpired | TokenInvalid


def hash_password(plain_password: str, rounds: int = 12) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: int, username: str, role: str, settings: Settings) -> str:
    """Create a JWT access token with sub (user id), username, role, iat and exp."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_access_token(token: str, settings: Settings) -> TokenResult:
    """
    Decode and validate a JWT.

    Never raises: returns TokenValid with the claims, TokenExpired when the
    signature is good but exp has passed, or TokenInvalid for anything else
    (bad signature, malformed token, missing or mistyped claims).
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        return TokenExpired()
    except jwt.PyJWTError as e:
        return TokenInvalid(reason=type(e).__name__)

    username = payload.get("username")
    role = payload.get("role")
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return TokenInvalid(reason="bad subject")
    if not isinstance(username, str) or not isinstance(role, str):
        return TokenInvalid(reason="missing identity claims")
    return TokenValid(claims=TokenClaims(user_id=user_id, username=username, role=role))
