# backend/salescast/core/security.py

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt, JWTError

from salescast.core.config import settings

# keep algorithm consistent between the session and the oauth state cookie
ALGORITHM = "HS256"

OAUTH_STATE_COOKIE = "salescast_oauth_state"
OAUTH_STATE_TTL_MINUTES = 10


def _encode(claims: dict[str, Any], expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = claims.copy()
    to_encode.update({"iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, settings.session_secret, algorithm=ALGORITHM)


def _decode(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, settings.session_secret, algorithms=[ALGORITHM])
    except JWTError as e:
        raise ValueError("Invalid token") from e


def create_session_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Fixed lifetime from issuance; there is no sliding renewal."""
    return _encode(
        {"sub": str(user_id), "typ": "session"},
        expires_delta or timedelta(minutes=settings.session_ttl_minutes),
    )


def read_session_token(token: Optional[str]) -> Optional[int]:
    """Return the user id carried by a session cookie, or None if it is unusable."""
    if not token:
        return None

    try:
        payload = _decode(token)
    except ValueError:
        return None

    if payload.get("typ") != "session":
        return None

    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None


def new_oauth_state() -> tuple[str, str]:
    """Returns (state, signed cookie value)."""
    state = secrets.token_urlsafe(24)
    cookie = _encode(
        {"state": state, "typ": "oauth_state"},
        timedelta(minutes=OAUTH_STATE_TTL_MINUTES),
    )
    return state, cookie


def check_oauth_state(cookie: Optional[str], state: Optional[str]) -> bool:
    if not cookie or not state:
        return False

    try:
        payload = _decode(cookie)
    except ValueError:
        return False

    if payload.get("typ") != "oauth_state":
        return False

    return secrets.compare_digest(str(payload.get("state", "")), state)
