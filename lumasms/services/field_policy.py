"""Field access policy: decide whether an actor may set a user column to a value.

Pure and deterministic. Rules are evaluated in a fixed priority order (read-only,
sensitive, staff, root-gated) so a field that appears in more than one table always
resolves to the same reason.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from lumasms.models.group import ROOT_GID
from lumasms.schemas.auth import Actor
from lumasms.schemas.results import FieldDenialReason
from lumasms.services.sanitize import sanitize_input

FieldAccessClass = Literal["ReadOnly", "Staff", "Sensitive", "RootGated", "Open"]

# Denial reasons (also used as FieldDenied.reason).
READ_ONLY: FieldDenialReason = "READ_ONLY"
SENSITIVE: FieldDenialReason = "SENSITIVE"
STAFF_ONLY: FieldDenialReason = "STAFF_ONLY"
ROOT_ONLY: FieldDenialReason = "ROOT_ONLY"

# System-maintained fields; uid is immutable.
READ_ONLY_FIELDS: frozenset[str] = frozenset(
    {"uid", "registered_ip", "join_date", "last_visit", "last_active", "last_ip"}
)
# Changed by their owner only through a re-authenticated workflow.
SENSITIVE_FIELDS: frozenset[str] = frozenset({"password_hash", "email"})
STAFF_FIELDS: frozenset[str] = frozenset({"gid", "username"})
# Field whose value is checked against the root group.
ROOT_GATED_FIELD = "gid"

_UNSET: Any = object()


class Allow(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed: Literal[True] = True


class Deny(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed: Literal[False] = False
    reason: FieldDenialReason


PolicyDecision = Allow | Deny

ALLOW = Allow()


def is_root_value(value: Any) -> bool:
    """True when value names the root group: 1, "1", " 01 " all do, control characters ignored; booleans never do."""
    if isinstance(value, bool) or value is None:
        return False
    if isinstance(value, int):
        return value == ROOT_GID
    try:
        return int(sanitize_input(str(value))) == ROOT_GID
    except (TypeError, ValueError):
        return False


def classify(field: str, value: Any = _UNSET) -> FieldAccessClass:
    """
    Access class of a field. With a value, gid set to the root group classifies as RootGated.

    Tables are checked in policy priority order; unknown fields are Open.
    """
    if field in READ_ONLY_FIELDS:
        return "ReadOnly"
    if field in SENSITIVE_FIELDS:
        return "Sensitive"
    if field == ROOT_GATED_FIELD and value is not _UNSET and is_root_value(value):
        return "RootGated"
    if field in STAFF_FIELDS:
        return "Staff"
    return "Open"


def decide(
    actor: Actor,
    field: str,
    value: Any,
    allow_sensitive_override: bool = False,
) -> PolicyDecision:
    """
    Decide whether actor may set field to value.

    - allow_sensitive_override: set only by internal re-authentication workflows
      (password and email change); lets a non-staff owner touch a sensitive field.
    """
    if field in READ_ONLY_FIELDS:
        return Deny(reason=READ_ONLY)
    if field in SENSITIVE_FIELDS and not allow_sensitive_override and not actor.staff_user:
        return Deny(reason=SENSITIVE)
    if field in STAFF_FIELDS and not actor.staff_user:
        return Deny(reason=STAFF_ONLY)
    if field == ROOT_GATED_FIELD and is_root_value(value) and not actor.staff_root:
        return Deny(reason=ROOT_ONLY)
    return ALLOW


def first_denial(
    actor: Actor,
    changes: list[tuple[str, Any]],
    allow_sensitive_override: bool = False,
) -> tuple[str, Deny] | None:
    """Evaluate every (field, value) pair in order; return the first denied field and its decision."""
    for field, value in changes:
        decision = decide(actor, field, value, allow_sensitive_override)
        if isinstance(decision, Deny):
            return field, decision
    return None
