"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors cars/models.py --
dataclasses own domain shape; stores, directories and routes do the work.

Layer rule: no imports from api/, web/, or cars/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered player of the car shop.

    hashed_password is the bcrypt hash; the plaintext is never kept. The API
    layer never serializes this field.

    id is None before the record is written to the database.
    """

    username: str
    fullname: str
    score: int = 0
    is_admin: bool = False
    id: str | None = None
    hashed_password: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class SessionUser:
    """The identity carried inside a login token.

    Built from a verified token on every request; it is the caller identity
    that route handlers pass to the directories. It is a snapshot taken at
    login time, so it never carries score.
    """

    id: str
    username: str
    fullname: str
    is_admin: bool = False

    @classmethod
    def from_user(cls, user: User) -> SessionUser:
        return cls(id=user.id, username=user.username, fullname=user.fullname, is_admin=user.is_admin)
