"""Request/response schemas for user listing, detail and account changes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, EmailStr, Field


class UserPublic(BaseModel):
    """User row as exposed outward; never carries password_hash."""

    uid: int
    gid: int
    username: str
    email: str
    can_msg: bool
    can_submit: bool
    can_comment: bool
    registered_ip: str
    join_date: datetime | None = None
    last_visit: datetime | None = None
    last_active: datetime | None = None
    last_ip: str

    class Config:
        from_attributes = True


class UserDetail(UserPublic):
    """Single user with counts of related content."""

    comments: int = Field(default=0, ge=0, description="Number of comments written by the user")
    submissions: int = Field(default=0, ge=0, description="Number of accepted submissions")


class UserList(BaseModel):
    """One page of users."""

    users: list[UserPublic]
    page: int
    count: int


class ListUsersRequest(BaseModel):
    """Body for PUT /user/: paging, sorting and exact-match filters."""

    page: int = Field(default=0, ge=0)
    count: int = Field(default=25, ge=0)
    column: str = Field(default="", description="Column to sort by; empty for no sorting")
    dsc: bool = Field(default=False, description="Sort descending")
    filter: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Exact-match filters as a list of single-entry {column: value} objects",
    )


class RegisterRequest(BaseModel):
    """Body for POST /user/ (registration)."""

    username: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=128)
    email: EmailStr


class UpdateProfileRequest(BaseModel):
    """Body for PATCH /user/{uid}: list of single-entry {field: value} objects."""

    data: list[dict[str, Any]] = Field(default_factory=list)


class ChangePasswordRequest(BaseModel):
    """Body for POST /user/password."""

    oldpassword: str = Field(default="", max_length=128)
    newpassword: str = Field(default="", max_length=128)


class ChangeEmailRequest(BaseModel):
    """Body for POST /user/email."""

    password: str = Field(default="", max_length=128)
    email: EmailStr
