# backend/salescast/api/auth_routes.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from salescast.core import google_oauth
from salescast.core.config import settings
from salescast.core.database import get_db
from salescast.core.security import (
    OAUTH_STATE_COOKIE,
    OAUTH_STATE_TTL_MINUTES,
    check_oauth_state,
    create_session_token,
    new_oauth_state,
)
from salescast.services.accounts import resolve_login

logger = logging.getLogger(__name__)

router = APIRouter()


def _back_to_app() -> RedirectResponse:
    # rejected sign-ins land here too: no session, no error page
    response = RedirectResponse(url="/", status_code=302)
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
    return response


@router.get("/google")
def google_login():
    state, state_cookie = new_oauth_state()

    response = RedirectResponse(url=google_oauth.build_authorize_url(state), status_code=302)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state_cookie,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
        max_age=OAUTH_STATE_TTL_MINUTES * 60,
        path="/",
    )
    return response


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    db: Session = Depends(get_db),
):
    if error or not code:
        logger.warning("Google sign-in aborted: %s", error or "no code")
        return _back_to_app()

    if not check_oauth_state(request.cookies.get(OAUTH_STATE_COOKIE), state):
        logger.warning("Google sign-in rejected: bad oauth state")
        return _back_to_app()

    try:
        identity = await google_oauth.fetch_identity(code)
    except google_oauth.ProviderError as e:
        logger.warning("Google sign-in rejected: %s", e)
        return _back_to_app()

    # sync SQLAlchemy work; keep it off the event loop
    user = await run_in_threadpool(resolve_login, db, identity)
    if user is None:
        return _back_to_app()

    response = _back_to_app()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(user.id),
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
        max_age=settings.session_ttl_minutes * 60,
        path="/",
    )
    return response
