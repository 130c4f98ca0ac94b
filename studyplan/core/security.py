"""
Password hashing and bearer tokens.

Passwords are hashed with bcrypt directly. Tokens are HS256 JWTs from
python-jose carrying the user id (`sub`) and a `type` claim so refresh
tokens cannot be used as access tokens.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from studyplan.core.config import settings
from studyplan.core.errors import AuthenticationError

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"


# =====================================================
# Passwords
# =====================================================
def get_password_hash(password: str) -> str:
    if not password:
        raise ValueError("Password cannot be empty")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """False for empty input or a malformed stored hash."""
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


# =====================================================
# Tokens
# =====================================================
def _lifetime(token_type: str) -> timedelta:
    if token_type == TOKEN_TYPE_REFRESH:
        return timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def create_token(
    subject: Any,
    token_type: str = TOKEN_TYPE_ACCESS,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Signed JWT for `subject` (usually a user id)."""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(subject),
        "type": token_type,
        "iat": now,
        "exp": now + (expires_delta or _lifetime(token_type)),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(subject: Any, expires_delta: Optional[timedelta] = None) -> str:
    return create_token(subject, TOKEN_TYPE_ACCESS, expires_delta)


def create_refresh_token(subject: Any, expires_delta: Optional[timedelta] = None) -> str:
    return create_token(subject, TOKEN_TYPE_REFRESH, expires_delta)


def decode_token(token: str, token_type: str = TOKEN_TYPE_ACCESS) -> Dict[str, Any]:
    """
    Validate signature, expiry and token type.

    Raises:
        AuthenticationError: The token is unusable for `token_type`
    """
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError as e:
        raise AuthenticationError("Token has expired") from e
    except JWTError as e:
        raise AuthenticationError("Invalid or expired token") from e

    if claims.get("type") != token_type:
        raise AuthenticationError("Invalid or expired token")
    if not claims.get("sub"):
        raise AuthenticationError("Invalid token subject")
    return claims


def token_expires_in(token_type: str = TOKEN_TYPE_ACCESS) -> int:
    """Lifetime in seconds, as reported to clients."""
    return int(_lifetime(token_type).total_seconds())
