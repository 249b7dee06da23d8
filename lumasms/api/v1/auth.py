"""Login/logout routes and the dependencies that resolve the requester from the session."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from lumasms.api.v1.outcomes import client_ip, raise_for_failure
from lumasms.core.config import get_settings, settings
from lumasms.core.database import get_db
from lumasms.schemas.auth import Actor, LoginRequest, SessionSubject, TokenResponse
from lumasms.schemas.results import LoggedOut, NotAuthenticated
from lumasms.services.authentication import check_login, login, logout, resolve_actor
from lumasms.services.sessions import CookieSessionTransport
from lumasms.services.user_store import UserStore

router = APIRouter()
bearer = HTTPBearer(auto_error=False)
session_cookie = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)


def get_session_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer)],
    cookie: Annotated[str | None, Depends(session_cookie)],
) -> str | None:
    """Session token from the Authorization header, falling back to the session cookie."""
    if credentials is not None:
        return credentials.credentials
    return cookie


def get_actor(
    token: Annotated[str | None, Depends(get_session_token)],
    db: Annotated[Session, Depends(get_db)],
) -> Actor | None:
    """Dependency: resolved requester, or None when not logged in. Services decide what None means."""
    return resolve_actor(db, token)


@router.put("/login", response_model=TokenResponse)
def put_login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with username and password; sets the session cookie and returns the token.
    The token may also be sent as: Authorization: Bearer <access_token>
    """
    result = login(db, body.username, body.password)
    raise_for_failure(result)
    subject = result.subject
    token = CookieSessionTransport(response, get_settings()).issue(subject)
    UserStore(db).record_visit(subject.uid, client_ip(request))
    return TokenResponse(access_token=token, uid=subject.uid, username=subject.username)


@router.get("/logout", response_model=LoggedOut)
def get_logout(response: Response) -> LoggedOut:
    """Invalidate the session cookie."""
    return logout(CookieSessionTransport(response, get_settings()))


@router.get("/verify", response_model=SessionSubject)
def get_verify(
    token: Annotated[str | None, Depends(get_session_token)],
    db: Annotated[Session, Depends(get_db)],
) -> SessionSubject:
    """Return who is logged in. 401 when there is no valid session."""
    subject = check_login(db, token)
    if subject is None:
        raise_for_failure(NotAuthenticated())
    return subject


@router.get("/permission", response_model=Actor)
def get_permission(
    actor: Annotated[Actor | None, Depends(get_actor)],
) -> Actor:
    """Return the current user's capabilities. 401 when there is no valid session."""
    if actor is None:
        raise_for_failure(NotAuthenticated())
    return actor
