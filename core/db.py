"""
core/db.py -- Engine construction shared by the user and car stores.

Each store owns its own Table objects and MetaData; this module only knows how
to open a database. Any SQLAlchemy URL works. SQLite gets two extra settings:
  - check_same_thread=False, since FastAPI runs sync handlers in a threadpool
    that shares pooled connections
  - journal_mode=WAL on every new connection, so readers never block the
    single writer

Layer rule: core/ imports nothing from auth/, cars/, api/ or web/.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timezone

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    # PRAGMAs are per connection; pooled connections do not inherit them.
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def open_engine(db_url: str, metadata: MetaData) -> Engine:
    """Create an engine for db_url and make sure metadata's tables exist."""
    is_sqlite = db_url.startswith("sqlite")
    engine = create_engine(db_url, connect_args={"check_same_thread": False} if is_sqlite else {})
    if is_sqlite:
        event.listen(engine, "connect", _set_wal_mode)
    metadata.create_all(engine)
    return engine


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    """Opaque public id: 12 hex chars, safe to hand to browsers."""
    return secrets.token_hex(6)
