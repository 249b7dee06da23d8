"""User directory (list and detail) and root-only account deletion."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy.orm import Session

from lumasms.core.config import get_settings
from lumasms.schemas.auth import Actor
from lumasms.schemas.results import (
    DeleteResult,
    Done,
    InvalidInput,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
)
from lumasms.schemas.users import UserDetail, UserList, UserPublic
from lumasms.services.sanitize import sanitize_input
from lumasms.services.user_store import UserStore, coerce_value

logger = logging.getLogger(__name__)

# Columns that may be used for exact-match filters and for sorting in listings.
FILTER_COLUMNS: frozenset[str] = frozenset(
    {"uid", "gid", "username", "can_msg", "can_submit", "can_comment"}
)
SORT_COLUMNS: frozenset[str] = frozenset(
    {"uid", "username", "gid", "join_date", "last_visit", "last_active"}
)


def list_users(
    db: Session,
    page: int = 0,
    count: int = 0,
    column: str = "",
    asc: bool = True,
    filters: Iterable[Mapping[str, Any]] = (),
) -> UserList | InvalidInput:
    """
    One page of users, optionally sorted by column and narrowed by exact-match filters.

    count <= 0 uses LIST_DEFAULT_COUNT; larger counts are capped at LIST_MAX_COUNT.
    Rows never include the password digest.
    """
    settings = get_settings()
    if count <= 0:
        count = settings.LIST_DEFAULT_COUNT
    count = min(count, settings.LIST_MAX_COUNT)
    page = max(page, 0)

    predicates: list[tuple[str, Any]] = []
    for entry in filters:
        if not isinstance(entry, Mapping) or len(entry) != 1:
            return InvalidInput(field="filter", detail="Filters must be single-entry {column: value} objects.")
        ((name, value),) = entry.items()
        name = sanitize_input(str(name))
        if name not in FILTER_COLUMNS:
            return InvalidInput(field="filter", detail=f"Cannot filter by {name!r}.")
        try:
            predicates.append((name, coerce_value(name, value)))
        except ValueError as e:
            return InvalidInput(field="filter", detail=str(e))

    column = sanitize_input(column or "")
    if column and column not in SORT_COLUMNS:
        return InvalidInput(field="column", detail=f"Cannot sort by {column!r}.")

    rows = UserStore(db).list_page(
        predicates,
        sort=column or None,
        asc=asc,
        offset=page * count,
        limit=count,
    )
    return UserList(
        users=[UserPublic.model_validate(u) for u in rows],
        page=page,
        count=count,
    )


def get_user(db: Session, uid: int) -> UserDetail | NotFound:
    """A single user plus the number of comments and accepted submissions they authored."""
    store = UserStore(db)
    user = store.get(uid)
    if user is None:
        return NotFound()
    comments, submissions = store.content_counts(uid)
    public = UserPublic.model_validate(user)
    return UserDetail(**public.model_dump(), comments=comments, submissions=submissions)


def delete_user(db: Session, actor: Actor | None, target_uid: int) -> DeleteResult:
    """Hard-delete an account. Only root administrators may do this."""
    if actor is None:
        return NotAuthenticated()
    if not actor.staff_root:
        logger.info(
            "User deletion denied",
            extra={"operation": "delete_user", "uid": actor.uid, "target_uid": target_uid, "outcome": "root_only"},
        )
        return PermissionDenied(reason="ROOT_ONLY")
    affected = UserStore(db).delete(target_uid)
    if not affected:
        return NotFound()
    logger.info("User deleted", extra={"operation": "delete_user", "uid": actor.uid, "target_uid": target_uid})
    return Done()
