"""Tagged result variants returned by the account services.

Every expected outcome (including denials) is a value, never an exception. Each
variant carries a ``kind`` discriminator so the HTTP layer and callers can match
on it; failures also expose ``ok = False``.
"""

from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from lumasms.schemas.auth import SessionSubject

# Reasons a field mutation is rejected by the field access policy.
FieldDenialReason = Literal["READ_ONLY", "SENSITIVE", "STAFF_ONLY", "ROOT_ONLY"]

# Reasons an actor may not perform an operation at all.
PermissionReason = Literal["NOT_OWNER", "BANNED", "ROOT_ONLY"]

ConflictField = Literal["username", "email"]


class Outcome(BaseModel):
    """Base for all result variants."""

    model_config = ConfigDict(frozen=True)

    ok: ClassVar[bool] = True


# Successes


class LoggedIn(Outcome):
    """Credentials verified; the caller decides whether to mint a session."""

    kind: Literal["success"] = "success"
    subject: SessionSubject


class LoggedOut(Outcome):
    kind: Literal["logged_out"] = "logged_out"


class Created(Outcome):
    kind: Literal["created"] = "created"
    uid: int


class Updated(Outcome):
    kind: Literal["updated"] = "updated"
    count: int = Field(..., ge=0, description="Rows affected by the update.")


class Done(Outcome):
    kind: Literal["done"] = "done"


# Failures


class InvalidInput(Outcome):
    """Missing or malformed input."""

    ok: ClassVar[bool] = False
    kind: Literal["invalid_input"] = "invalid_input"
    field: str | None = None
    detail: str = "Invalid input."


class AuthFailed(Outcome):
    """Bad credentials. Never says whether the username or the password was wrong."""

    ok: ClassVar[bool] = False
    kind: Literal["auth_failed"] = "auth_failed"
    detail: str = "Invalid username or password."


class NotAuthenticated(Outcome):
    ok: ClassVar[bool] = False
    kind: Literal["not_authenticated"] = "not_authenticated"
    detail: str = "Not authenticated."


class PermissionDenied(Outcome):
    ok: ClassVar[bool] = False
    kind: Literal["permission_denied"] = "permission_denied"
    reason: PermissionReason


class FieldDenied(Outcome):
    """A field in an update batch was rejected by policy; nothing was written."""

    ok: ClassVar[bool] = False
    kind: Literal["field_denied"] = "field_denied"
    field: str
    reason: FieldDenialReason


class NothingToUpdate(Outcome):
    ok: ClassVar[bool] = False
    kind: Literal["nothing_to_update"] = "nothing_to_update"


class Conflict(Outcome):
    """username or email already taken."""

    ok: ClassVar[bool] = False
    kind: Literal["conflict"] = "conflict"
    field: ConflictField


class SamePassword(Outcome):
    ok: ClassVar[bool] = False
    kind: Literal["same_password"] = "same_password"


class NotFound(Outcome):
    ok: ClassVar[bool] = False
    kind: Literal["not_found"] = "not_found"


LoginResult = LoggedIn | InvalidInput | AuthFailed
RegisterResult = Created | Conflict | InvalidInput
UpdateResult = (
    Updated
    | NotAuthenticated
    | PermissionDenied
    | FieldDenied
    | NothingToUpdate
    | InvalidInput
    | Conflict
    | NotFound
)
ChangePasswordResult = UpdateResult | SamePassword | AuthFailed
ChangeEmailResult = UpdateResult | AuthFailed
DeleteResult = Done | NotAuthenticated | PermissionDenied | NotFound
