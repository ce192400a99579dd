"""
api/main.py -- FastAPI application entry point for carshop.

Run with:      python main.py serve
               uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware    -- credentialed CORS for the local browser client origins
  2. SlowAPIMiddleware -- enforces per-route rate limits from api.limiter

Lifespan opens the user and car stores on startup, wraps them in their
directories on app.state, and closes them on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.car import router as car_router
from api.routes.user import router as user_router
from auth.directory import UserDirectory
from auth.store import UserStore
from cars.directory import CarDirectory
from cars.store import CarStore
from core.config import get_settings

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("carshop.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the stores on startup and close them on shutdown.

    Both stores share one database URL; each creates only its own tables.
    """
    logger.info("carshop API starting up")
    app.state.user_store = UserStore(db_url=_settings.database_url)
    app.state.car_store = CarStore(db_url=_settings.database_url)
    app.state.user_directory = UserDirectory(app.state.user_store, initial_score=_settings.initial_score)
    app.state.car_directory = CarDirectory(app.state.car_store)
    logger.info("Stores initialized (%s)", _settings.database_url)
    if not app.state.user_store.has_users():
        logger.warning("No users yet -- sign up, or run: python main.py create-user <name> --admin")

    yield

    app.state.car_store.close()
    app.state.user_store.close()
    logger.info("carshop API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="carshop API",
    description="Cars catalogue with user login, signup and scores.",
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter

# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(car_router, prefix="/api", tags=["Cars"])
app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(user_router, prefix="/api", tags=["Users"])
# The static fallback router is mounted by asgi.py, not here, so it is always
# registered after every API route.


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 for login/signup floods; Retry-After tells the client when to try again."""
    logger.warning("Rate limit hit on %s from %s", request.url.path, request.client.host if request.client else "?")
    resp = _error_response(429, "rate_limited", "Too many attempts, slow down.", str(exc))
    resp.headers["Retry-After"] = str(int(getattr(exc, "retry_after", 60)))
    return resp


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(422, "validation_error", "Malformed request.", str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    """Render HTTP errors for the browser client.

    Route handlers raise HTTPException with a short string detail
    ("Cannot add car"); the client shows those verbatim, so they go out as
    plain text. Structured dict details keep the JSON error envelope.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback; the client only ever sees a generic 500 envelope."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "Something went wrong.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=__version__)
