"""Google OAuth helpers: authorize URL and code -> identity exchange."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from salescast.core.config import settings

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GOOGLE_SCOPES = ["openid", "email", "profile"]


class ProviderError(Exception):
    """The provider did not hand back a usable identity."""


@dataclass(frozen=True)
class ProviderIdentity:
    provider_id: str
    email: str
    display_name: str


def build_authorize_url(state: str) -> str:
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_redirect_uri,
        "response_type": "code",
        "scope": " ".join(GOOGLE_SCOPES),
        "state": state,
        "prompt": "select_account",
    }
    return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"


async def fetch_identity(code: str) -> ProviderIdentity:
    if not settings.google_client_id or not settings.google_client_secret:
        raise ProviderError("Google OAuth credentials are not configured")

    try:
        async with httpx.AsyncClient(timeout=10) as client:
            token_response = await client.post(
                GOOGLE_TOKEN_URL,
                headers={"Accept": "application/json"},
                data={
                    "client_id": settings.google_client_id,
                    "client_secret": settings.google_client_secret,
                    "code": code,
                    "grant_type": "authorization_code",
                    "redirect_uri": settings.google_redirect_uri,
                },
            )
            token_response.raise_for_status()
            access_token = token_response.json().get("access_token")
            if not access_token:
                raise ProviderError("Google did not return an access token")

            user_response = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            user_response.raise_for_status()
            profile = user_response.json()
    except httpx.HTTPError as exc:
        raise ProviderError(f"Google request failed: {exc}") from exc

    sub = profile.get("sub")
    email = profile.get("email")
    if not sub or not email:
        raise ProviderError("Google profile is missing sub or email")

    if profile.get("email_verified") is False:
        raise ProviderError(f"Google email {email} is not verified")

    return ProviderIdentity(
        provider_id=str(sub),
        email=email,
        display_name=profile.get("name") or email,
    )
