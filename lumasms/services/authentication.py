"""Authentication: login, logout, registration and resolving the requester from a session token."""

from __future__ import annotations

import logging

import jwt
from sqlalchemy.orm import Session

from lumasms.core.config import get_settings
from lumasms.core.security import (
    EMAIL_MAX_LEN,
    PASSWORD_MAX_LEN,
    USERNAME_MAX_LEN,
    decode_session_token,
    hash_password,
    verify_password,
)
from lumasms.schemas.auth import Actor, SessionSubject
from lumasms.schemas.results import (
    AuthFailed,
    Conflict,
    Created,
    InvalidInput,
    LoggedIn,
    LoggedOut,
    LoginResult,
    RegisterResult,
)
from lumasms.services.sanitize import sanitize_input
from lumasms.services.sessions import SessionTransport
from lumasms.services.user_store import UniqueViolation, UserStore

logger = logging.getLogger(__name__)


def login(db: Session, username: str, password: str) -> LoginResult:
    """
    Verify username and password.

    Unknown usernames still pay for one bcrypt comparison and produce the same
    AuthFailed as a wrong password. Minting a session is left to the caller.
    """
    username = sanitize_input(username or "")
    if not username or not password:
        logger.info("Login rejected", extra={"operation": "login", "outcome": "invalid_input"})
        return InvalidInput(detail="Username and password are required.")

    user = UserStore(db).find_by_username(username)
    if user is None:
        verify_password(password, "")
        logger.info("Login failed", extra={"operation": "login", "outcome": "auth_failed"})
        return AuthFailed()
    if not verify_password(password, user.password_hash):
        logger.info("Login failed", extra={"operation": "login", "outcome": "auth_failed"})
        return AuthFailed()
    return LoggedIn(subject=SessionSubject(uid=user.uid, username=user.username))


def logout(transport: SessionTransport) -> LoggedOut:
    """End the current session by having the transport overwrite it with an expired marker."""
    transport.invalidate()
    return LoggedOut()


def _validate_registration(username: str, password: str, email: str) -> InvalidInput | None:
    if not username or not password or not email:
        return InvalidInput(detail="Username, password and email are required.")
    if len(username) > USERNAME_MAX_LEN:
        return InvalidInput(field="username", detail="Invalid username length.")
    if len(email) > EMAIL_MAX_LEN:
        return InvalidInput(field="email", detail="Invalid email length.")
    if len(password) > PASSWORD_MAX_LEN:
        return InvalidInput(field="password", detail="Invalid password length.")
    return None


def register(
    db: Session,
    username: str,
    password: str,
    email: str,
    ip: str = "",
) -> RegisterResult:
    """
    Create an account after checking that neither username nor email is taken.

    The pre-check gives a precise Conflict in the common case; the unique indexes
    decide races between concurrent registrations, and their violation maps to the
    same Conflict.
    """
    username = sanitize_input(username or "")
    email = sanitize_input(email or "")
    invalid = _validate_registration(username, password, email)
    if invalid is not None:
        logger.info("Registration rejected", extra={"operation": "register", "outcome": "invalid_input"})
        return invalid

    store = UserStore(db)
    if store.exists_username(username):
        return Conflict(field="username")
    if store.exists_email(email):
        return Conflict(field="email")

    ip = sanitize_input(ip or "")
    record = {
        "username": username,
        "email": email,
        "password_hash": hash_password(password),
        "gid": get_settings().DEFAULT_GROUP_ID,
        "registered_ip": ip,
        "last_ip": ip,
    }
    try:
        uid = store.insert(record)
    except UniqueViolation as e:
        logger.info(
            "Registration lost uniqueness race",
            extra={"operation": "register", "outcome": "conflict", "field": e.field},
        )
        return Conflict(field=e.field)
    logger.info("User registered", extra={"operation": "register", "uid": uid})
    return Created(uid=uid)


def _uid_from_token(token: str | None) -> int | None:
    if not token:
        return None
    try:
        payload = decode_session_token(token)
    except jwt.PyJWTError:
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None


def check_login(db: Session, token: str | None) -> SessionSubject | None:
    """Subject of a valid session whose user still exists, else None."""
    uid = _uid_from_token(token)
    if uid is None:
        return None
    user = UserStore(db).get(uid)
    if user is None:
        return None
    return SessionSubject(uid=user.uid, username=user.username)


def resolve_actor(db: Session, token: str | None) -> Actor | None:
    """Identity and capabilities of the session's user, read fresh from the store; None if not logged in."""
    uid = _uid_from_token(token)
    if uid is None:
        return None
    user = UserStore(db).get(uid)
    if user is None:
        return None
    group = user.group
    return Actor(
        uid=user.uid,
        username=user.username,
        staff_user=bool(group is not None and group.staff_user),
        staff_root=bool(group is not None and group.staff_root),
        can_msg=bool(user.can_msg),
        can_submit=bool(user.can_submit),
        can_comment=bool(user.can_comment),
    )
