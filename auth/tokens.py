"""
auth/tokens.py -- Login token codec, password hashing, and cookie helpers.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       user_id, username, fullname, is_admin, and expiry. Validation returns
       None on any failure -- the route layer turns that into a 401.

  Passwords: bcrypt directly (no passlib wrapper). The _DUMMY_HASH constant
       enables timing equalization in the user directory's login check so
       response time does not reveal whether a username exists.

  SECRET_KEY: sourced from core.config.get_settings(), which refuses to start
       in production without one.

Layer rule: no imports from api/, web/, or cars/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from auth.models import SessionUser, User
from core.config import get_settings

logger = logging.getLogger("carshop.auth")

_settings = get_settings()

_ALGORITHM = "HS256"

LOGIN_COOKIE = "loginToken"

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Computed once at module load. verify_password() runs against it when the
# username does not exist so unknown users cost the same as wrong passwords.
DUMMY_HASH: str = hash_password("carshop_timing_dummy")


# ---------------------------------------------------------------------------
# Token encode / decode
# ---------------------------------------------------------------------------


def create_login_token(user: User | SessionUser, expire_seconds: int = 0) -> str:
    """Encode a signed JWT with the user's public identity.

    Args:
        user:           The user that just logged in or signed up.
        expire_seconds: Token lifetime in seconds. If 0 (default), uses
                        Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    payload = {
        "sub": user.username,
        "user_id": user.id,
        "fullname": user.fullname,
        "is_admin": bool(user.is_admin),
        "exp": datetime.now(timezone.utc) + timedelta(seconds=duration),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def validate_login_token(token: str | None) -> SessionUser | None:
    """Decode and verify a login token. Returns the SessionUser or None.

    Missing, malformed, expired and tampered tokens all come back as None --
    callers treat every one of them as "no session".
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if not payload.get("user_id") or "sub" not in payload:
        return None
    return SessionUser(
        id=str(payload["user_id"]),
        username=payload["sub"],
        fullname=payload.get("fullname") or payload["sub"],
        is_admin=bool(payload.get("is_admin", False)),
    )


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_login_cookie(response, token: str) -> None:
    """Write the login token as an httpOnly session cookie on the response.

    No max_age: the cookie lives for the browser session and the token's own
    exp claim bounds how long it stays usable.
    samesite="lax" still sends the cookie to the API from the local dev
    origins listed in Settings.cors_origins (same site, different port).
    """
    response.set_cookie(
        LOGIN_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        secure=_settings.secure_cookies,
    )


def clear_login_cookie(response) -> None:
    response.delete_cookie(LOGIN_COOKIE)
