"""Google sign-in: consent redirect and callback.

The callback never exposes why a login failed: every failure is logged and
answered with a redirect to ``/`` without tokens or a session cookie.
"""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from studentms.api.dependencies import get_db, get_google_client
from studentms.api.routers.users import set_token_cookies
from studentms.core.config import get_settings
from studentms.core.errors import AuthError, AuthenticationFailure
from studentms.core.federation import resolve_federated_user
from studentms.core.logging import get_logger
from studentms.core.oauth import GoogleOAuthClient
from studentms.core.sessions import set_session_cookie

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)

STATE_COOKIE = "oauth_state"
STATE_MAX_AGE = 600
FAILURE_REDIRECT = "/"

DbDep = Annotated[AsyncSession, Depends(get_db)]
GoogleDep = Annotated[GoogleOAuthClient, Depends(get_google_client)]


def _denied() -> RedirectResponse:
    response = RedirectResponse(FAILURE_REDIRECT, status_code=302)
    response.delete_cookie(STATE_COOKIE)
    return response


@router.get("/google")
async def google_login(google: GoogleDep) -> RedirectResponse:
    """Send the browser to Google's consent screen."""
    state = secrets.token_urlsafe(32)
    response = RedirectResponse(google.authorization_url(state), status_code=302)
    response.set_cookie(
        STATE_COOKIE,
        state,
        max_age=STATE_MAX_AGE,
        httponly=True,
        secure=get_settings().session_cookie_secure,
        samesite="lax",
    )
    return response


@router.get("/google/callback")
async def google_callback(
    request: Request,
    db: DbDep,
    google: GoogleDep,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    """Finish Google sign-in: resolve the user, open a session, hand out tokens."""
    expected_state = request.cookies.get(STATE_COOKIE)
    try:
        if error:
            raise AuthenticationFailure(f"provider returned error={error}")
        if not code:
            raise AuthenticationFailure("callback carried no authorization code")
        if not state or not expected_state or not secrets.compare_digest(state, expected_state):
            raise AuthenticationFailure("state mismatch")

        profile = await google.fetch_profile(code)
        login = await resolve_federated_user(db, profile)

        response = RedirectResponse(get_settings().frontend_url, status_code=302)
        set_session_cookie(response, login.user.id)
    except AuthError as exc:
        logger.warning("Google sign-in denied", error=type(exc).__name__, reason=str(exc))
        return _denied()

    set_token_cookies(response, login.tokens)
    response.delete_cookie(STATE_COOKIE)
    logger.info(
        "Google sign-in succeeded",
        user_id=str(login.user.id),
        new_account=login.created,
    )
    return response
