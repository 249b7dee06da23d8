"""Pydantic request/response schemas and service result variants."""

from lumasms.schemas.auth import (
    Actor,
    LoginRequest,
    SessionSubject,
    TokenResponse,
)
from lumasms.schemas.health import HealthResponse
from lumasms.schemas.results import (
    AuthFailed,
    Conflict,
    Created,
    Done,
    FieldDenied,
    InvalidInput,
    LoggedIn,
    LoggedOut,
    NotAuthenticated,
    NotFound,
    NothingToUpdate,
    Outcome,
    PermissionDenied,
    SamePassword,
    Updated,
)
from lumasms.schemas.users import (
    ChangeEmailRequest,
    ChangePasswordRequest,
    ListUsersRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserDetail,
    UserList,
    UserPublic,
)

__all__ = [
    "Actor",
    "AuthFailed",
    "ChangeEmailRequest",
    "ChangePasswordRequest",
    "Conflict",
    "Created",
    "Done",
    "FieldDenied",
    "HealthResponse",
    "InvalidInput",
    "ListUsersRequest",
    "LoggedIn",
    "LoggedOut",
    "LoginRequest",
    "NotAuthenticated",
    "NotFound",
    "NothingToUpdate",
    "Outcome",
    "PermissionDenied",
    "RegisterRequest",
    "SamePassword",
    "SessionSubject",
    "TokenResponse",
    "UpdateProfileRequest",
    "Updated",
    "UserDetail",
    "UserList",
    "UserPublic",
]
