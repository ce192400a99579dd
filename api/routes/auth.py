"""
api/routes/auth.py -- Login, signup, logout and user lookup endpoints.

Routes:
  GET  /api/auth/{user_id}   -- public profile of a user
  POST /api/auth/login       -- password login; sets loginToken cookie
  POST /api/auth/signup      -- create account; sets loginToken cookie
  POST /api/auth/logout      -- clears loginToken cookie

Security:
  Login and signup are rate-limited per IP (Settings.login_rate_limit).
  UserDirectory.check_login() provides timing equalization -- use it, never
  inline get_by_username() + verify_password().
  Cache-Control: no-store on every response that carries a fresh token.
  Login and signup failures return one fixed message each, whatever the cause,
  so they do not reveal which usernames exist.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from api.body import parse_body
from api.limiter import limiter
from api.models import LoginRequest, SignupRequest, UserOut
from auth.directory import UserDirectory
from auth.models import User
from auth.tokens import clear_login_cookie, create_login_token, set_login_cookie
from core.config import get_settings
from core.errors import DirectoryError

logger = logging.getLogger("carshop.api")

_settings = get_settings()

# Auth policy: every route here is public -- they are how a session starts.
router = APIRouter()


def _logged_in_response(user: User) -> JSONResponse:
    resp = JSONResponse(content=UserOut.from_user(user).model_dump(by_alias=True))
    set_login_cookie(resp, create_login_token(user))
    resp.headers["Cache-Control"] = "no-store"
    return resp


@limiter.limit(_settings.login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=UserOut)
def login(
    request: Request,
    body: LoginRequest = Depends(parse_body(LoginRequest, "Not you!", 401)),
) -> JSONResponse:
    """Authenticate with username and password; set the loginToken cookie."""
    users: UserDirectory = request.app.state.user_directory
    try:
        user = users.check_login(body.username, body.password)
    except DirectoryError as exc:
        logger.warning("Failed login for %r: %s", body.username, exc)
        resp = PlainTextResponse("Not you!", status_code=401)
        resp.headers["Cache-Control"] = "no-store"
        return resp
    return _logged_in_response(user)


@limiter.limit(_settings.login_rate_limit)
@router.post("/auth/signup", response_model=UserOut)
def signup(
    request: Request,
    body: SignupRequest = Depends(parse_body(SignupRequest, "Nope!", 401)),
) -> JSONResponse:
    """Create a regular (non-admin) account and log it in."""
    users: UserDirectory = request.app.state.user_directory
    try:
        user = users.save(User(username=body.username, fullname=body.fullname), password=body.password)
    except DirectoryError as exc:
        logger.error("Cannot signup: %s", exc)
        return PlainTextResponse("Nope!", status_code=401)
    return _logged_in_response(user)


@router.post("/auth/logout")
async def logout() -> PlainTextResponse:
    """Clear the loginToken cookie. Tokens are stateless, so nothing else to do."""
    resp = PlainTextResponse("logged-out!")
    clear_login_cookie(resp)
    return resp


@router.get("/auth/{user_id}", response_model=UserOut)
def get_user(request: Request, user_id: str) -> UserOut:
    users: UserDirectory = request.app.state.user_directory
    try:
        user = users.get_by_id(user_id)
    except DirectoryError as exc:
        logger.error("Cannot get user: %s", exc)
        raise HTTPException(status_code=404, detail="Cannot get user") from exc
    return UserOut.from_user(user)
