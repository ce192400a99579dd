"""
auth/store.py -- Users table and its repository.

UserStore is the only code that reads or writes the users table; _row_to_user
turns rows back into auth.models.User. Passwords arrive already hashed.

Ids are random hex (core.db.new_id) so a profile URL never leaks how many
accounts exist. is_admin is stored as 0/1 for SQLite's sake.

Layer rule: no imports from api/, web/, or cars/.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, func, select

from auth.models import User
from core.db import new_id, now_iso, open_engine

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(32), primary_key=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("fullname", String(255), nullable=False),
    Column("score", Integer, nullable=False, server_default="0"),
    Column("is_admin", Integer, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
)


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore("sqlite:///carshop.db")
        user_id = store.create_user(User(username="puki", fullname="Puki Ja", hashed_password=...))
        store.update_score(user_id, 9000)
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine = open_engine(db_url, _metadata)

    def has_users(self) -> bool:
        with self.engine.connect() as conn:
            count = conn.execute(select(func.count()).select_from(_users)).scalar()
        return bool(count)

    def create_user(self, user: User) -> str:
        """Insert user and return its new id.

        A taken username raises sqlalchemy.exc.IntegrityError from the UNIQUE
        constraint; callers that pre-check still rely on it for races.
        """
        user_id = new_id()
        row = {
            "id": user_id,
            "username": user.username,
            "hashed_password": user.hashed_password,
            "fullname": user.fullname,
            "score": user.score,
            "is_admin": int(bool(user.is_admin)),
            "created_at": now_iso(),
        }
        with self.engine.begin() as conn:
            conn.execute(_users.insert(), row)
        return user_id

    def _fetch_one(self, clause) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(clause)).fetchone()
        return None if row is None else _row_to_user(row)

    def get_by_username(self, username: str) -> User | None:
        """Exact, case-sensitive match."""
        return self._fetch_one(_users.c.username == username)

    def get_by_id(self, user_id: str) -> User | None:
        return self._fetch_one(_users.c.id == user_id)

    def update_score(self, user_id: str, score: int) -> bool:
        """Set score for user_id. Returns False when no such user.

        Score is the only column that changes after signup.
        """
        with self.engine.begin() as conn:
            result = conn.execute(_users.update().where(_users.c.id == user_id).values(score=score))
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        fullname=row.fullname,
        score=row.score,
        is_admin=bool(row.is_admin),
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
