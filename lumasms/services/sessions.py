"""Session transport: how an authenticated session reaches and leaves the client."""

from typing import Protocol

from fastapi import Response

from lumasms.core.config import Settings
from lumasms.core.security import create_session_token
from lumasms.schemas.auth import SessionSubject

# Value written over the session cookie on logout.
LOGGED_OUT_MARKER = "logout"


class SessionTransport(Protocol):
    """What the core needs from a session carrier."""

    def issue(self, subject: SessionSubject) -> str: ...

    def invalidate(self) -> None: ...


class CookieSessionTransport:
    """
    Carries a signed session token in an http-only cookie on the outgoing response.

    Sessions are self-contained, so invalidation only has to replace the cookie with
    an already-expired marker; there is no server-side session state to revoke.
    """

    def __init__(self, response: Response, settings: Settings) -> None:
        self.response = response
        self.settings = settings

    def issue(self, subject: SessionSubject) -> str:
        token = create_session_token(subject.uid, subject.username)
        self.response.set_cookie(
            self.settings.SESSION_COOKIE_NAME,
            token,
            max_age=self.settings.JWT_EXPIRE_MINUTES * 60,
            httponly=True,
            secure=self.settings.SESSION_COOKIE_SECURE,
            samesite="lax",
        )
        return token

    def invalidate(self) -> None:
        self.response.set_cookie(
            self.settings.SESSION_COOKIE_NAME,
            LOGGED_OUT_MARKER,
            max_age=0,
            expires=0,
            httponly=True,
            secure=self.settings.SESSION_COOKIE_SECURE,
            samesite="lax",
        )
