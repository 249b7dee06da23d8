"""Data store boundary for user rows.

All statements go through SQLAlchemy with bound parameters. Integrity errors on the
username/email unique indexes surface as UniqueViolation; lost connectivity surfaces
as StoreUnavailable, which callers let propagate.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, Literal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from lumasms.models import Comment, Group, Resource, User
from lumasms.models.content import QUEUE_ACCEPTED
from lumasms.models.user import EMAIL_UNIQUE_INDEX, USERNAME_UNIQUE_INDEX
from lumasms.services.sanitize import sanitize_input

logger = logging.getLogger(__name__)

UniqueField = Literal["username", "email"]


class StoreUnavailable(Exception):
    """Raised when the database cannot be reached. Not an expected outcome."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class UniqueViolation(Exception):
    """Raised when a write collides with an existing username or email."""

    def __init__(self, field: UniqueField) -> None:
        self.field = field
        super().__init__(f"{field} already exists")


def unique_field_from_error(error: IntegrityError) -> UniqueField | None:
    """Map an integrity error to the unique field it violated, by index/column name in the message."""
    text = str(error.orig).lower()
    # Postgres: "duplicate key value violates unique constraint ..."; sqlite: "UNIQUE constraint failed: ..."
    if "unique" not in text and "duplicate" not in text:
        return None
    # Index names first: the DETAIL line quotes the colliding value, which may contain either column name.
    if USERNAME_UNIQUE_INDEX in text:
        return "username"
    if EMAIL_UNIQUE_INDEX in text:
        return "email"
    if "username" in text:
        return "username"
    if "email" in text:
        return "email"
    return None


class UserStore:
    """find/insert/update/delete over the users table, scoped to one session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _guard(self, writing: bool = False) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            field = unique_field_from_error(e)
            if field is None:
                raise
            raise UniqueViolation(field) from e
        except OperationalError as e:
            if writing:
                self.db.rollback()
            logger.error("User store unavailable", extra={"error": type(e).__name__})
            raise StoreUnavailable("Database is temporarily unavailable", cause=e) from e

    def find(self, **predicates: Any) -> list[User]:
        """Rows matching all exact-match predicates (column=value)."""
        stmt = select(User)
        for column, value in predicates.items():
            stmt = stmt.where(getattr(User, column) == value)
        with self._guard():
            return list(self.db.scalars(stmt).unique())

    def list_page(
        self,
        predicates: list[tuple[str, Any]],
        sort: str | None,
        asc: bool,
        offset: int,
        limit: int,
    ) -> list[User]:
        """Rows matching all exact-match predicates, optionally ordered, sliced by offset/limit."""
        stmt = select(User)
        for column, value in predicates:
            stmt = stmt.where(getattr(User, column) == value)
        if sort:
            order = getattr(User, sort)
            stmt = stmt.order_by(order.asc() if asc else order.desc())
        stmt = stmt.offset(offset).limit(limit)
        with self._guard():
            return list(self.db.scalars(stmt).unique())

    def get(self, uid: int) -> User | None:
        with self._guard():
            return self.db.get(User, uid)

    def group_exists(self, gid: int) -> bool:
        with self._guard():
            return self.db.get(Group, gid) is not None

    def find_by_username(self, username: str) -> User | None:
        """Exact (case-sensitive) username lookup, as used by login."""
        rows = self.find(username=username)
        return rows[0] if rows else None

    def exists_username(self, username: str) -> bool:
        """Case-insensitive existence check, matching the unique index."""
        stmt = select(User.uid).where(func.lower(User.username) == username.lower()).limit(1)
        with self._guard():
            return self.db.scalar(stmt) is not None

    def exists_email(self, email: str) -> bool:
        """Case-insensitive existence check, matching the unique index."""
        stmt = select(User.uid).where(func.lower(User.email) == email.lower()).limit(1)
        with self._guard():
            return self.db.scalar(stmt) is not None

    def insert(self, record: dict[str, Any]) -> int:
        """Insert one user row and commit; return its uid."""
        with self._guard(writing=True):
            user = User(**record)
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user.uid

    def update(self, uid: int, fields: dict[str, Any]) -> int:
        """Single UPDATE ... WHERE uid = :uid for all fields; commit; return affected rows."""
        with self._guard(writing=True):
            affected = (
                self.db.query(User)
                .filter(User.uid == uid)
                .update(fields, synchronize_session=False)
            )
            self.db.commit()
            return affected

    def delete(self, uid: int) -> int:
        """Hard delete; return affected rows."""
        with self._guard(writing=True):
            affected = (
                self.db.query(User)
                .filter(User.uid == uid)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            return affected

    def record_visit(self, uid: int, ip: str) -> None:
        """Stamp the system-maintained visit fields after a successful login."""
        now = datetime.now(UTC)
        self.update(uid, {"last_visit": now, "last_active": now, "last_ip": ip})

    def content_counts(self, uid: int) -> tuple[int, int]:
        """(comments, accepted submissions) authored by uid."""
        with self._guard():
            comments = self.db.scalar(
                select(func.count()).select_from(Comment).where(Comment.uid == uid)
            )
            submissions = self.db.scalar(
                select(func.count())
                .select_from(Resource)
                .where(Resource.uid == uid, Resource.queue_code == QUEUE_ACCEPTED)
            )
        return comments or 0, submissions or 0


# Text columns that may never be blanked.
REQUIRED_TEXT_FIELDS: frozenset[str] = frozenset({"username", "email", "password_hash"})

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


def coerce_value(field: str, value: Any) -> Any:
    """
    Convert an externally supplied value to the Python type of the users column.

    Strings are sanitized. Raises ValueError for unknown columns or unusable values.
    """
    column = User.__table__.columns.get(field)
    if column is None:
        raise ValueError(f"Unknown field {field!r}.")
    kind = column.type.python_type
    if kind is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            text = value.strip().lower()
            if text in _TRUE_STRINGS:
                return True
            if text in _FALSE_STRINGS:
                return False
        raise ValueError(f"{field} must be a boolean.")
    if kind is int:
        if isinstance(value, (bool, float)):
            raise ValueError(f"{field} must be an integer.")
        try:
            return int(sanitize_input(value))
        except (TypeError, ValueError):
            raise ValueError(f"{field} must be an integer.") from None
    if kind is str:
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValueError(f"{field} must be a string.")
        text = sanitize_input(str(value))
        if field in REQUIRED_TEXT_FIELDS and not text:
            raise ValueError(f"{field} must not be empty.")
        if column.type.length is not None and len(text) > column.type.length:
            raise ValueError(f"{field} is too long.")
        return text
    raise ValueError(f"{field} cannot be set.")
