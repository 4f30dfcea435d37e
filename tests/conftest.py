from __future__ import annotations

import sys
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from taskapp.backend.core.config import settings  # noqa: E402
from taskapp.backend.db.session import get_session  # noqa: E402
from taskapp.backend.main import app  # noqa: E402
from taskapp.backend.services import task_repository  # noqa: E402
from taskapp.backend.services.auth_provider import AuthProvider, get_auth_provider  # noqa: E402

JWT_SECRET = "test-jwt-secret"
AUTH_BASE = "http://auth.test/auth/v1"


def make_token(
    user_id: str,
    *,
    email: str | None = None,
    expires_in: int = 3600,
    secret: str = JWT_SECRET,
    audience: str = "authenticated",
) -> str:
    payload = {
        "sub": user_id,
        "aud": audience,
        "role": "authenticated",
        "exp": int(time.time()) + expires_in,
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(user_id: str, **kwargs) -> dict[str, str]:
    return {"Cookie": f"{settings.access_cookie_name}={make_token(user_id, **kwargs)}"}


def make_provider(handler: Callable[[httpx.Request], httpx.Response]) -> AuthProvider:
    http = httpx.Client(base_url=AUTH_BASE, transport=httpx.MockTransport(handler))
    return AuthProvider("http://auth.test", "anon-key", http=http)


class RecordingNotifier:
    def __init__(self):
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def local_jwt(monkeypatch):
    """Verify sessions locally with the test secret; no auth service configured."""
    monkeypatch.setattr(settings, "auth_jwt_secret", JWT_SECRET)
    monkeypatch.setattr(settings, "auth_url", "")
    return settings


@pytest.fixture
def clock(monkeypatch):
    """Deterministic repository clock: each call advances one second."""
    state = {"now": datetime(2026, 10, 17, 9, 0, 0, tzinfo=timezone.utc)}

    def _tick() -> datetime:
        state["now"] += timedelta(seconds=1)
        return state["now"]

    monkeypatch.setattr(task_repository, "utcnow", _tick)
    return state


@pytest.fixture
def client(engine, local_jwt):
    def _get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_auth_provider] = lambda: None
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides = {}


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
