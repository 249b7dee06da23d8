"""Translate service result variants into HTTP errors."""

from fastapi import HTTPException, Request, status

from lumasms.schemas.results import Outcome

STATUS_BY_KIND: dict[str, int] = {
    "invalid_input": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "auth_failed": status.HTTP_401_UNAUTHORIZED,
    "not_authenticated": status.HTTP_401_UNAUTHORIZED,
    "permission_denied": status.HTTP_403_FORBIDDEN,
    "field_denied": status.HTTP_403_FORBIDDEN,
    "nothing_to_update": status.HTTP_400_BAD_REQUEST,
    "same_password": status.HTTP_400_BAD_REQUEST,
    "conflict": status.HTTP_409_CONFLICT,
    "not_found": status.HTTP_404_NOT_FOUND,
}


def raise_for_failure(result: Outcome) -> None:
    """Raise HTTPException carrying the result as detail when it is a failure variant."""
    if result.ok:
        return
    code = STATUS_BY_KIND[result.kind]
    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    raise HTTPException(
        status_code=code,
        detail=result.model_dump(mode="json"),
        headers=headers,
    )


def client_ip(request: Request) -> str:
    """Remote address of the caller, or empty when the transport does not expose one."""
    return request.client.host if request.client else ""
