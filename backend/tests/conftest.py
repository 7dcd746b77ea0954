"""Shared fixtures: in-memory SQLite per test, wired into the app through get_db."""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from salescast.core.config import settings
from salescast.core.database import get_db, init_db
from salescast.core.security import create_session_token
from salescast.main import app
from salescast.models.user import User
from salescast.models.whitelist import WhitelistEntry


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def client_for(client):
    """TestClient carrying a valid session cookie for `user`."""

    def _client_for(user: User) -> TestClient:
        return TestClient(
            app,
            cookies={settings.session_cookie_name: create_session_token(user.id)},
        )

    return _client_for


@pytest.fixture()
def make_user(db):
    def _make_user(name: str, role: str = "Individual", manager: User = None) -> User:
        user = User(
            google_id=f"google-{name.lower()}",
            email=f"{name.lower()}@example.com",
            display_name=name,
            role=role,
            manager_id=manager.id if manager else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def whitelist(db):
    def _whitelist(email: str) -> None:
        db.add(WhitelistEntry(email=email))
        db.commit()

    return _whitelist
