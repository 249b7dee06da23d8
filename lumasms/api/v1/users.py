"""User directory, registration, profile changes and deletion."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from lumasms.api.v1.auth import get_actor
from lumasms.api.v1.outcomes import client_ip, raise_for_failure
from lumasms.core.config import get_settings
from lumasms.core.database import get_db
from lumasms.schemas.auth import Actor
from lumasms.schemas.results import Created, Done, Updated
from lumasms.schemas.users import (
    ChangeEmailRequest,
    ChangePasswordRequest,
    ListUsersRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserDetail,
    UserList,
)
from lumasms.services.accounts import delete_user, get_user, list_users
from lumasms.services.authentication import register
from lumasms.services.profile import change_email, change_password, update_profile

router = APIRouter()


@router.get("", response_model=UserList)
def get_users(
    db: Annotated[Session, Depends(get_db)],
) -> UserList:
    """First page of users, unsorted."""
    result = list_users(db, 0, get_settings().LIST_DEFAULT_COUNT, "", False, [])
    raise_for_failure(result)
    return result


@router.put("", response_model=UserList)
def put_users(
    body: ListUsersRequest,
    db: Annotated[Session, Depends(get_db)],
) -> UserList:
    """
    Page of users with optional sort column and exact-match filters, e.g.
    {"page": 0, "count": 25, "column": "username", "dsc": false, "filter": [{"gid": 2}]}
    """
    result = list_users(db, body.page, body.count, body.column, not body.dsc, body.filter)
    raise_for_failure(result)
    return result


@router.post("", response_model=Created, status_code=status.HTTP_201_CREATED)
def post_register(
    body: RegisterRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> Created:
    """Register a new account. 409 with the colliding field when username or email is taken."""
    result = register(db, body.username, body.password, str(body.email), ip=client_ip(request))
    raise_for_failure(result)
    return result


@router.post("/password", response_model=Updated)
def post_password(
    body: ChangePasswordRequest,
    actor: Annotated[Actor | None, Depends(get_actor)],
    db: Annotated[Session, Depends(get_db)],
) -> Updated:
    """Change the current user's password; requires the current password."""
    result = change_password(db, actor, body.oldpassword, body.newpassword)
    raise_for_failure(result)
    return result


@router.post("/email", response_model=Updated)
def post_email(
    body: ChangeEmailRequest,
    actor: Annotated[Actor | None, Depends(get_actor)],
    db: Annotated[Session, Depends(get_db)],
) -> Updated:
    """Change the current user's email; requires the current password."""
    result = change_email(db, actor, body.password, str(body.email))
    raise_for_failure(result)
    return result


@router.get("/{uid}", response_model=UserDetail)
def get_user_detail(
    uid: int,
    db: Annotated[Session, Depends(get_db)],
) -> UserDetail:
    """One user with comment and submission counts."""
    result = get_user(db, uid)
    raise_for_failure(result)
    return result


@router.patch("/{uid}", response_model=Updated)
def patch_user(
    uid: int,
    body: UpdateProfileRequest,
    actor: Annotated[Actor | None, Depends(get_actor)],
    db: Annotated[Session, Depends(get_db)],
) -> Updated:
    """Update profile fields, e.g. {"data": [{"can_msg": false}]}. All fields are applied or none."""
    result = update_profile(db, actor, uid, body.data)
    raise_for_failure(result)
    return result


@router.delete("/{uid}", response_model=Done)
def delete_user_route(
    uid: int,
    actor: Annotated[Actor | None, Depends(get_actor)],
    db: Annotated[Session, Depends(get_db)],
) -> Done:
    """Permanently delete an account (root administrators only)."""
    result = delete_user(db, actor, uid)
    raise_for_failure(result)
    return result
