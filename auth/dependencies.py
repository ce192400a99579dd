"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Two token sources are checked in priority order:
  1. "loginToken" cookie -- set by POST /api/auth/login and /api/auth/signup.
  2. Authorization: Bearer <token> header -- scripts and API clients.

try_get_current_user() is the soft variant (returns None on failure).
require_login(message) builds a dependency that raises HTTP 401 with that
message when the request carries no valid token. FastAPI decodes a declared
body parameter before it solves dependencies, so gated routes take their body
through api.body.parse_body() declared after the gate; an anonymous caller
gets the 401 whatever it sent.

Layer rule: no imports from web/ or cars/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import HTTPException, Request

from auth.models import SessionUser
from auth.tokens import LOGIN_COOKIE, validate_login_token


def try_get_current_user(request: Request) -> SessionUser | None:
    """Resolve the caller from the login cookie or a Bearer header.

    Returns the SessionUser on success, None on any failure. Never raises.
    The token is self-contained, so no store lookup happens here.
    """
    token: str | None = request.cookies.get(LOGIN_COOKIE)

    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]

    return validate_login_token(token)


def require_login(message: str) -> Callable[[Request], SessionUser]:
    """Return a dependency that requires a valid login token.

    Use as a FastAPI dependency:
        @router.post("/car")
        def add_car(user: SessionUser = Depends(require_login("Cannot add car"))): ...

    The message becomes the plain-text 401 body.
    """

    def dependency(request: Request) -> SessionUser:
        user = try_get_current_user(request)
        if user is None:
            raise HTTPException(status_code=401, detail=message)
        return user

    return dependency
