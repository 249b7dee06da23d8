"""Request/response schemas for login, sessions and the resolved actor."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials for login. Empty values are reported by the service as invalid input."""

    username: str = Field(default="", max_length=255, description="Username")
    password: str = Field(default="", max_length=128, description="Password")


class TokenResponse(BaseModel):
    """Session token returned after successful login (also set as the session cookie)."""

    access_token: str = Field(..., description="Signed session token")
    token_type: str = Field(default="bearer", description="Token type")
    uid: int
    username: str


class SessionSubject(BaseModel):
    """Identity carried by a session: who is logged in."""

    uid: int
    username: str

    class Config:
        from_attributes = True
        frozen = True


class Actor(BaseModel):
    """
    Resolved identity and capabilities of the requester.

    Staff flags come from the user's group; can_* flags are per-user ban controls.
    An unauthenticated requester is represented by None, not by an Actor.
    """

    uid: int
    username: str
    staff_user: bool = False
    staff_root: bool = False
    can_msg: bool = True
    can_submit: bool = True
    can_comment: bool = True

    class Config:
        frozen = True

    @property
    def is_banned(self) -> bool:
        """True when any of the behavioural flags has been revoked."""
        return not (self.can_msg and self.can_submit and self.can_comment)
