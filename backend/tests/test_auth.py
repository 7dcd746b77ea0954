"""Google sign-in, whitelist gate, session cookie and logout."""

import asyncio
from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from salescast.api import auth_routes
from salescast.core import google_oauth
from salescast.core.config import settings
from salescast.core.google_oauth import ProviderError, ProviderIdentity
from salescast.core.security import OAUTH_STATE_COOKIE, create_session_token
from salescast.main import app
from salescast.models.user import User

IDENTITY = ProviderIdentity(provider_id="g-123", email="Rep@Example.com", display_name="Rita Rep")


@pytest.fixture()
def provider(monkeypatch):
    """Stand-in for Google: returns whatever identity (or error) the test sets."""
    box = {"result": IDENTITY}

    async def fake_fetch_identity(code: str) -> ProviderIdentity:
        if isinstance(box["result"], Exception):
            raise box["result"]
        return box["result"]

    monkeypatch.setattr(google_oauth, "fetch_identity", fake_fetch_identity)
    return box


def start_login(client: TestClient) -> str:
    resp = client.get("/auth/google", follow_redirects=False)
    assert resp.status_code == 302
    return parse_qs(urlparse(resp.headers["location"]).query)["state"][0]


def finish_login(client: TestClient, state: str):
    return client.get(
        "/auth/google/callback",
        params={"code": "auth-code", "state": state},
        follow_redirects=False,
    )


def test_login_redirects_to_google(client):
    resp = client.get("/auth/google", follow_redirects=False)

    assert resp.status_code == 302
    location = urlparse(resp.headers["location"])
    assert location.netloc == "accounts.google.com"
    query = parse_qs(location.query)
    assert query["scope"] == ["openid email profile"]
    assert query["redirect_uri"] == [settings.google_redirect_uri]
    assert query["state"][0]
    assert OAUTH_STATE_COOKIE in resp.cookies


def test_non_whitelisted_login_creates_nothing(client, db, provider):
    state = start_login(client)
    resp = finish_login(client, state)

    assert resp.status_code == 302
    assert resp.headers["location"] == "/"
    assert settings.session_cookie_name not in resp.cookies
    assert db.query(User).count() == 0


def test_first_login_creates_individual_without_manager(client, db, provider, whitelist):
    whitelist("rep@example.com")

    state = start_login(client)
    resp = finish_login(client, state)

    assert resp.status_code == 302
    assert resp.headers["location"] == "/"
    assert settings.session_cookie_name in resp.cookies

    users = db.query(User).all()
    assert len(users) == 1
    assert users[0].google_id == "g-123"
    assert users[0].email == "rep@example.com"
    assert users[0].display_name == "Rita Rep"
    assert users[0].role == "Individual"
    assert users[0].manager_id is None

    me = client.get("/api/current_user")
    assert me.status_code == 200
    assert me.json()["display_name"] == "Rita Rep"


def test_returning_user_keeps_role_and_manager(client, db, provider, whitelist, make_user):
    whitelist("rep@example.com")
    boss = make_user("Boss", role="Manager")
    existing = User(
        google_id="g-123",
        email="rep@example.com",
        display_name="Rita Rep",
        role="Manager",
        manager_id=boss.id,
    )
    db.add(existing)
    db.commit()

    resp = finish_login(client, start_login(client))

    assert settings.session_cookie_name in resp.cookies
    db.expire_all()
    assert db.query(User).count() == 2
    again = db.query(User).filter(User.google_id == "g-123").one()
    assert again.role == "Manager"
    assert again.manager_id == boss.id


def test_callback_rejects_mismatched_state(client, db, provider, whitelist):
    whitelist("rep@example.com")
    start_login(client)

    resp = finish_login(client, "forged-state")

    assert resp.headers["location"] == "/"
    assert settings.session_cookie_name not in resp.cookies
    assert db.query(User).count() == 0


def test_callback_without_state_cookie_is_rejected(client, db, provider, whitelist):
    whitelist("rep@example.com")

    resp = finish_login(client, "anything")

    assert settings.session_cookie_name not in resp.cookies
    assert db.query(User).count() == 0


def test_provider_failure_rejects_without_side_effects(client, db, provider, whitelist):
    whitelist("rep@example.com")
    provider["result"] = ProviderError("token exchange failed")

    resp = finish_login(client, start_login(client))

    assert resp.status_code == 302
    assert settings.session_cookie_name not in resp.cookies
    assert db.query(User).count() == 0


def test_provider_error_param_redirects_home(client, db):
    resp = client.get(
        "/auth/google/callback",
        params={"error": "access_denied"},
        follow_redirects=False,
    )

    assert resp.status_code == 302
    assert resp.headers["location"] == "/"
    assert db.query(User).count() == 0


def test_current_user_is_null_without_session(client):
    resp = client.get("/api/current_user")
    assert resp.status_code == 200
    assert resp.json() is None


def test_current_user_returns_profile(client_for, make_user):
    boss = make_user("Boss", role="Manager")
    rep = make_user("Rita", manager=boss)

    resp = client_for(rep).get("/api/current_user")

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == rep.id
    assert body["email"] == "rita@example.com"
    assert body["role"] == "Individual"
    assert body["manager_id"] == boss.id


def test_expired_session_is_anonymous(client, make_user):
    rep = make_user("Rita")
    token = create_session_token(rep.id, expires_delta=timedelta(seconds=-1))

    c = TestClient(app, cookies={settings.session_cookie_name: token})

    assert c.get("/api/current_user").json() is None
    assert c.post(
        "/api/forecast",
        json={"period": "2024-03-01", "quota": 1, "commit": 1, "best_case": 1},
    ).status_code == 401


def test_tampered_session_is_anonymous(client, make_user):
    rep = make_user("Rita")
    token = create_session_token(rep.id) + "x"

    c = TestClient(app, cookies={settings.session_cookie_name: token})

    assert c.get("/api/current_user").json() is None


def test_session_for_deleted_user_is_anonymous(client):
    c = TestClient(app, cookies={settings.session_cookie_name: create_session_token(9999)})
    assert c.get("/api/current_user").json() is None


def test_logout_clears_session(client_for, make_user):
    c = client_for(make_user("Rita"))

    resp = c.get("/api/logout", follow_redirects=False)

    assert resp.status_code == 302
    assert resp.headers["location"] == "/"
    set_cookie = resp.headers["set-cookie"]
    assert set_cookie.startswith(f"{settings.session_cookie_name}=")
    assert "Max-Age=0" in set_cookie


def test_logout_without_session_is_fine(client):
    resp = client.get("/api/logout", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/"


def test_login_db_work_runs_off_the_event_loop(client, db, provider, whitelist, monkeypatch):
    whitelist("rep@example.com")
    real_resolve_login = auth_routes.resolve_login
    seen = {}

    def spy(session, identity):
        try:
            asyncio.get_running_loop()
            seen["on_loop"] = True
        except RuntimeError:
            seen["on_loop"] = False
        return real_resolve_login(session, identity)

    monkeypatch.setattr(auth_routes, "resolve_login", spy)

    resp = finish_login(client, start_login(client))

    assert settings.session_cookie_name in resp.cookies
    assert seen == {"on_loop": False}
