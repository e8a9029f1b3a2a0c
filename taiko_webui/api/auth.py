"""Authentication API endpoints.

Routes stay thin: they collect form/JSON input, call ``AuthService`` and
write the session cookie. Failures propagate as ``AuthError`` and are
rendered by the handler in ``taiko_webui.main``.
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, Form, Response, status

from taiko_webui.api.dependencies import (
    get_auth_service,
    read_session,
    require_session_baid,
)
from taiko_webui.config import get_settings
from taiko_webui.models.auth import UpdatePasswordRequest, UpdateUsernameRequest
from taiko_webui.models.user import SimpleAuthUser
from taiko_webui.services.auth_service import AuthService
from taiko_webui.services.request_authenticator import SESSION_COOKIE_NAME, SessionCheck

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Auth"])

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _write_session_cookie(response: Response, value: str, expires: datetime) -> None:
    """Set the Authorization cookie with the flags shared by login and logout."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=value,
        expires=expires,
        path="/",
        secure=get_settings().cookie_secure,
        httponly=True,
        samesite="lax",
    )


@router.post("/register")
async def register(
    username: str = Form(""),
    password: str = Form(""),
    access_code: str = Form("", alias="accessCode"),
    auth_service: AuthService = Depends(get_auth_service),
) -> Response:
    """Link a new account to the Baid behind an access code.

    Returns:
        200 with an empty body. No session is issued.
    """
    await auth_service.register(username, password, access_code)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/login")
async def login(
    response: Response,
    username: str = Form(""),
    password: str = Form(""),
    current_session: SessionCheck = Depends(read_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> SimpleAuthUser:
    """Login with username and password.

    A cookie that no longer verifies, or whose Baid has no account, does not
    block login; it is replaced.

    Returns:
        The account's username and Baid, plus the session cookie
    """
    result = await auth_service.login(
        username,
        password,
        session_baid=current_session.baid if current_session.authenticated else None,
    )
    _write_session_cookie(response, result.token, result.expires_at)
    return result.user


@router.get("/session")
async def session(
    baid: int = Depends(require_session_baid),
    auth_service: AuthService = Depends(get_auth_service),
) -> SimpleAuthUser:
    """Describe the logged-in account."""
    return await auth_service.session(baid)


@router.post("/logout")
async def logout() -> Response:
    """Clear the session cookie.

    The token itself stays valid until it expires; nothing is persisted.
    """
    response = Response(status_code=status.HTTP_200_OK)
    _write_session_cookie(response, "", EPOCH)
    return response


@router.patch("/username")
async def change_username(
    request: UpdateUsernameRequest,
    baid: int = Depends(require_session_baid),
    auth_service: AuthService = Depends(get_auth_service),
) -> Response:
    await auth_service.change_username(baid, request.username)
    return Response(status_code=status.HTTP_200_OK)


@router.patch("/password")
async def change_password(
    request: UpdatePasswordRequest,
    baid: int = Depends(require_session_baid),
    auth_service: AuthService = Depends(get_auth_service),
) -> Response:
    await auth_service.change_password(
        baid,
        request.current_password,
        request.new_password,
    )
    logger.info("password_change_completed", baid=baid)
    return Response(status_code=status.HTTP_200_OK)
