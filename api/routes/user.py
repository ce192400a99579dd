"""
api/routes/user.py -- Profile update endpoint.

Routes:
  PUT /api/user  -- update the caller's score (requires login)

Only score is writable here. The directory rejects updates to anyone but the
caller; that failure and a non-numeric score both come back as 400.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from api.body import parse_body
from api.models import UserOut, UserScoreUpdate
from auth.dependencies import require_login
from auth.directory import UserDirectory
from auth.models import SessionUser, User
from core.coerce import to_integer
from core.errors import DirectoryError

logger = logging.getLogger("carshop.api")

router = APIRouter()


@router.put("/user", response_model=UserOut)
def update_user(
    request: Request,
    current_user: SessionUser = Depends(require_login("Cannot update user")),
    body: UserScoreUpdate = Depends(parse_body(UserScoreUpdate, "Cannot update user")),
) -> UserOut:
    users: UserDirectory = request.app.state.user_directory
    try:
        patch = User(
            id=body.id or current_user.id,
            username=current_user.username,
            fullname=current_user.fullname,
            score=to_integer(body.score, "score"),
        )
        saved = users.save(patch, acting_user=current_user)
    except DirectoryError as exc:
        logger.error("Cannot update user: %s", exc)
        raise HTTPException(status_code=400, detail="Cannot update user") from exc
    return UserOut.from_user(saved)
