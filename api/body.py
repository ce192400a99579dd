"""
api/body.py -- JSON request bodies as FastAPI dependencies.

FastAPI decodes and validates a declared body parameter before it solves any
dependency, so a malformed body from an anonymous caller would come back as a
422 instead of the gate's 401. Routes here take their body through
parse_body() instead, declared after require_login(), so the gate always runs
first.

A body that is not JSON or does not fit the model becomes the route's own
failure text and status ("Cannot add car" / 400, "Nope!" / 401), which is what
the browser client expects. An empty body is treated as {}.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from fastapi import HTTPException, Request
from pydantic import BaseModel, ValidationError

logger = logging.getLogger("carshop.api")

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_body(
    model: type[ModelT], message: str, status_code: int = 400
) -> Callable[[Request], Awaitable[ModelT]]:
    """Return a dependency that parses the request body into model.

    Use as a FastAPI dependency, after the login gate:
        def add_car(user=Depends(require_login("Cannot add car")),
                    body: CarIn = Depends(parse_body(CarIn, "Cannot add car"))): ...
    """

    async def dependency(request: Request) -> ModelT:
        raw = await request.body()
        try:
            data = json.loads(raw) if raw.strip() else {}
            return model.model_validate(data)
        except (ValueError, ValidationError) as exc:
            logger.warning("Rejected %s body on %s: %s", model.__name__, request.url.path, exc)
            raise HTTPException(status_code=status_code, detail=message) from exc

    return dependency
