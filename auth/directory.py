"""
auth/directory.py -- User directory: login check, signup, profile update, lookup.

The directory owns the user rules; UserStore owns the SQL. Every failure is
raised as a core.errors.DirectoryError subclass so route handlers can map it
to a status code without inspecting storage exceptions.

Layer rule: no imports from api/, web/, or cars/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.models import SessionUser, User
from auth.store import UserStore
from auth.tokens import DUMMY_HASH, hash_password, verify_password
from core.coerce import to_integer, to_text
from core.errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError, StorageError, UnauthorizedError

logger = logging.getLogger("carshop.auth")

MAX_NAME_LENGTH = 255
# bcrypt only reads the first 72 bytes and bcrypt>=5 refuses longer input.
MAX_PASSWORD_BYTES = 72


class UserDirectory:
    """User operations on top of an injected UserStore.

    Usage:
        users = UserDirectory(UserStore("sqlite:///carshop.db"), initial_score=10000)
        user = users.save(User(username="puki", fullname="Puki Ja"), password="s3cret")
        user = users.check_login("puki", "s3cret")
    """

    def __init__(self, store: UserStore, initial_score: int = 10000) -> None:
        self.store = store
        self.initial_score = initial_score

    def check_login(self, username: str | None, password: str | None) -> User:
        """Return the user whose credentials match, else raise UnauthorizedError.

        Always runs bcrypt whether or not the user exists, so response time
        does not tell an attacker which usernames are registered.
        """
        try:
            username = to_text(username, "username", MAX_NAME_LENGTH)
        except InvalidInputError as exc:
            raise UnauthorizedError(str(exc)) from exc
        if not username or not isinstance(password, str) or not password:
            raise UnauthorizedError("Username and password are required")
        user = self.store.get_by_username(username)
        if user is None or not user.hashed_password:
            verify_password(password, DUMMY_HASH)
            raise UnauthorizedError("Invalid username or password")
        if not verify_password(password, user.hashed_password):
            raise UnauthorizedError("Invalid username or password")
        return user

    def save(self, user: User, password: str | None = None, acting_user: SessionUser | None = None) -> User:
        """Sign up a new user (no id) or update an existing user's score (id set).

        Signup ignores user.is_admin and user.score: new accounts are never
        admins and always start at initial_score. Updates only touch score and
        only the user themselves may make them.
        """
        if user.id is None:
            return self._signup(user, password)
        return self._update_score(user, acting_user)

    def get_by_id(self, user_id: str) -> User:
        user = self.store.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"Cannot find user {user_id}")
        return user

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _signup(self, user: User, password: str | None) -> User:
        username = to_text(user.username, "username", MAX_NAME_LENGTH)
        fullname = to_text(user.fullname, "fullname", MAX_NAME_LENGTH)
        if not username or not isinstance(password, str) or not password:
            raise InvalidInputError("Username and password are required")
        try:
            password_bytes = len(password.encode("utf-8"))
        except UnicodeEncodeError as exc:
            raise InvalidInputError("Password is not valid UTF-8 text") from exc
        if password_bytes > MAX_PASSWORD_BYTES:
            raise InvalidInputError(f"Password is longer than {MAX_PASSWORD_BYTES} bytes")
        if self.store.get_by_username(username) is not None:
            raise ConflictError(f"Username {username!r} is already taken")

        new_user = User(
            username=username,
            fullname=fullname or username,
            score=self.initial_score,
            hashed_password=hash_password(password),
        )
        try:
            user_id = self.store.create_user(new_user)
        except IntegrityError as exc:
            raise ConflictError(f"Username {username!r} is already taken") from exc
        except SQLAlchemyError as exc:
            raise StorageError("Cannot save user") from exc
        logger.info("New user signed up: %s (%s)", username, user_id)
        return self.get_by_id(user_id)

    def _update_score(self, user: User, acting_user: SessionUser | None) -> User:
        if acting_user is None or acting_user.id != user.id:
            raise ForbiddenError("Users may only update their own record")
        score = to_integer(user.score, "score")
        try:
            updated = self.store.update_score(user.id, score)
        except SQLAlchemyError as exc:
            raise StorageError("Cannot save user") from exc
        if not updated:
            raise NotFoundError(f"Cannot find user {user.id}")
        return self.get_by_id(user.id)
