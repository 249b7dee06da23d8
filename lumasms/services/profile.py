"""Profile mutation: policy-checked batch updates and the re-authenticated password/email workflows."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy.orm import Session

from lumasms.core.security import EMAIL_MAX_LEN, PASSWORD_MAX_LEN, hash_password
from lumasms.schemas.auth import Actor
from lumasms.schemas.results import (
    AuthFailed,
    ChangeEmailResult,
    ChangePasswordResult,
    Conflict,
    FieldDenied,
    InvalidInput,
    LoggedIn,
    NotAuthenticated,
    NotFound,
    NothingToUpdate,
    PermissionDenied,
    SamePassword,
    Updated,
    UpdateResult,
)
from lumasms.services.authentication import login
from lumasms.services.field_policy import first_denial
from lumasms.services.sanitize import sanitize_input
from lumasms.services.user_store import UniqueViolation, UserStore, coerce_value

logger = logging.getLogger(__name__)

Changes = Iterable[Mapping[str, Any]] | Mapping[str, Any]


def _as_pairs(changes: Changes) -> list[tuple[str, Any]] | None:
    """Flatten [{field: value}, ...] (or a plain mapping) into ordered pairs; None if malformed."""
    if isinstance(changes, Mapping):
        return [(sanitize_input(str(k)), v) for k, v in changes.items()]
    pairs: list[tuple[str, Any]] = []
    for entry in changes:
        if not isinstance(entry, Mapping) or len(entry) != 1:
            return None
        ((field, value),) = entry.items()
        pairs.append((sanitize_input(str(field)), value))
    return pairs


def update_profile(
    db: Session,
    actor: Actor | None,
    target_uid: int,
    changes: Changes,
    allow_sensitive_override: bool = False,
) -> UpdateResult:
    """
    Apply a batch of field changes to one user, all or nothing.

    Every pair is checked against the field access policy before anything is written;
    the first denial aborts the batch. Accepted fields go out in a single UPDATE scoped
    to target_uid.

    - allow_sensitive_override: only for the re-authenticated workflows in this module.
    """
    if actor is None:
        return NotAuthenticated()
    if target_uid != actor.uid and not actor.staff_user:
        logger.info(
            "Profile update denied",
            extra={"operation": "update_profile", "uid": actor.uid, "target_uid": target_uid, "outcome": "not_owner"},
        )
        return PermissionDenied(reason="NOT_OWNER")
    if actor.is_banned:
        logger.info(
            "Profile update denied",
            extra={"operation": "update_profile", "uid": actor.uid, "target_uid": target_uid, "outcome": "banned"},
        )
        return PermissionDenied(reason="BANNED")

    pairs = _as_pairs(changes)
    if pairs is None:
        return InvalidInput(detail="Changes must be a list of single-entry {field: value} objects.")
    if not pairs:
        return NothingToUpdate()

    # Policy sees the value that will be written; uncoercible values are judged raw.
    coerced: list[tuple[str, Any]] = []
    invalid: InvalidInput | None = None
    for field, value in pairs:
        try:
            coerced.append((field, coerce_value(field, value)))
        except ValueError as e:
            coerced.append((field, value))
            if invalid is None:
                invalid = InvalidInput(field=field, detail=str(e))

    denied = first_denial(actor, coerced, allow_sensitive_override)
    if denied is not None:
        field, decision = denied
        logger.info(
            "Profile update denied",
            extra={
                "operation": "update_profile",
                "uid": actor.uid,
                "target_uid": target_uid,
                "field": field,
                "outcome": decision.reason,
            },
        )
        return FieldDenied(field=field, reason=decision.reason)
    if invalid is not None:
        return invalid

    values: dict[str, Any] = dict(coerced)
    store = UserStore(db)
    if "gid" in values and not store.group_exists(values["gid"]):
        return InvalidInput(field="gid", detail="Unknown group.")

    try:
        affected = store.update(target_uid, values)
    except UniqueViolation as e:
        return Conflict(field=e.field)
    if affected == 0:
        return NotFound()
    logger.info(
        "Profile updated",
        extra={"operation": "update_profile", "uid": actor.uid, "target_uid": target_uid, "fields": sorted(values)},
    )
    return Updated(count=affected)


def change_password(
    db: Session,
    actor: Actor | None,
    old_password: str,
    new_password: str,
) -> ChangePasswordResult:
    """Change the actor's own password after re-verifying the current one."""
    if old_password == new_password:
        return SamePassword()
    if actor is None:
        return NotAuthenticated()
    if not new_password or len(new_password) > PASSWORD_MAX_LEN:
        return InvalidInput(field="newpassword", detail="Invalid password length.")

    verified = login(db, actor.username, old_password)
    if not isinstance(verified, LoggedIn) or verified.subject.uid != actor.uid:
        logger.info("Password change re-authentication failed", extra={"operation": "change_password", "uid": actor.uid})
        return AuthFailed()

    return update_profile(
        db,
        actor,
        actor.uid,
        [{"password_hash": hash_password(new_password)}],
        allow_sensitive_override=True,
    )


def change_email(
    db: Session,
    actor: Actor | None,
    password: str,
    new_email: str,
) -> ChangeEmailResult:
    """Change the actor's own email after re-verifying the password and checking the address is free."""
    if actor is None:
        return NotAuthenticated()
    new_email = sanitize_input(new_email or "")
    if not new_email or len(new_email) > EMAIL_MAX_LEN:
        return InvalidInput(field="email", detail="Invalid email.")

    verified = login(db, actor.username, password)
    if not isinstance(verified, LoggedIn) or verified.subject.uid != actor.uid:
        logger.info("Email change re-authentication failed", extra={"operation": "change_email", "uid": actor.uid})
        return AuthFailed()

    if UserStore(db).exists_email(new_email):
        return Conflict(field="email")

    return update_profile(
        db,
        actor,
        actor.uid,
        [{"email": new_email}],
        allow_sensitive_override=True,
    )
