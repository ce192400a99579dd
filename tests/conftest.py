"""
tests/conftest.py -- Shared test fixtures for carshop integration tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory DBs for users + cars
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: module-scoped (TestClient, seeded users) pair
  - client: the same TestClient with its cookie jar emptied before each test

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

DEBUG must be set before any auth/core import so get_settings() auto-generates
SECRET_KEY instead of raising. The login rate limit is raised so the suite's
many logins never hit 429.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.directory import UserDirectory
from auth.models import SessionUser, User
from auth.store import UserStore
from auth.tokens import LOGIN_COOKIE, create_login_token, hash_password
from cars.directory import CarDirectory
from cars.store import CarStore

# Mount the web router once; guard against double inclusion when conftest is
# imported more than once in a session.
from web.routes import router as web_router

if not any(getattr(r, "path", None) == "/{path:path}" for r in app.routes):
    app.include_router(web_router, tags=["Web UI"])

# username -> (password, fullname, is_admin)
SEED_USERS: dict[str, tuple[str, str, bool]] = {
    "puki": ("puki-pass", "Puki Ja", False),
    "muki": ("muki-pass", "Muki Ba", False),
    "admin": ("admin-pass", "Shop Admin", True),
}

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, CarStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    user_url = f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true"
    car_url = f"sqlite:///file:test_cars_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=user_url), CarStore(db_url=car_url)


def _seed_users(user_store: UserStore) -> dict[str, SessionUser]:
    sessions: dict[str, SessionUser] = {}
    for username, (password, fullname, is_admin) in SEED_USERS.items():
        user_id = user_store.create_user(
            User(
                username=username,
                fullname=fullname,
                score=100,
                is_admin=is_admin,
                hashed_password=hash_password(password),
            )
        )
        sessions[username] = SessionUser(id=user_id, username=username, fullname=fullname, is_admin=is_admin)
    return sessions


def _patch_lifespan(user_store: UserStore, car_store: CarStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.car_store = car_store
        app.state.user_directory = UserDirectory(user_store, initial_score=10000)
        app.state.car_directory = CarDirectory(car_store)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, dict[str, SessionUser]], None, None]:
    """Yield (client, sessions) where sessions maps seeded usernames to SessionUser.

    Seeded users: puki and muki (regular), admin (is_admin=True). Passwords
    are in SEED_USERS.
    """
    user_store, car_store = _make_test_stores(request.module.__name__.replace(".", "_"))
    sessions = _seed_users(user_store)

    app.router.lifespan_context = _patch_lifespan(user_store, car_store)

    with TestClient(app, raise_server_exceptions=True) as test_client:
        yield test_client, sessions

    user_store.close()
    car_store.close()


@pytest.fixture
def client(api_client) -> TestClient:
    """The module's TestClient with no cookies -- every test starts logged out."""
    test_client, _sessions = api_client
    test_client.cookies.clear()
    return test_client


@pytest.fixture
def sessions(api_client) -> dict[str, SessionUser]:
    return api_client[1]


@pytest.fixture
def login_as(client: TestClient):
    """Return a function that logs the test client in as a seeded session.

    Mints the token directly instead of calling /api/auth/login, so route
    tests do not depend on the login endpoint.
    """

    def _login(session: SessionUser) -> TestClient:
        client.cookies.set(LOGIN_COOKIE, create_login_token(session))
        return client

    return _login
