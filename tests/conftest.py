"""Shared fixtures: a throwaway SQLite database, a fake clock and a fake push gateway."""

from __future__ import annotations

import json
import os
import sys
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

TEST_DB_PATH = Path(tempfile.gettempdir()) / f"lostfound-test-{os.getpid()}.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"

from cryptography.hazmat.primitives import serialization  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402

from lostfound.config import Settings, reset_settings_cache  # noqa: E402
from lostfound.infrastructure import database  # noqa: E402
from lostfound.infrastructure.models import UserModel  # noqa: E402
from lostfound.utils import Clock  # noqa: E402

TOKEN_URL = "https://oauth2.googleapis.com/token"
FCM_BASE_URL = "https://fcm.googleapis.com"
PROJECT_ID = "lostfound-test"


class FakeClock(Clock):
    """Clock whose monotonic time only moves when told to or when sleeping."""

    def __init__(self, start: float = 1000.0) -> None:
        self.current = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds


class FakeGateway:
    """Stand-in for the OAuth token endpoint and the push gateway.

    ``responses`` maps a device token to the list of responses returned for
    consecutive sends; the last entry repeats. Unknown tokens get a 200.
    """

    def __init__(self) -> None:
        self.responses: dict[str, list[httpx.Response | Exception]] = {}
        self.token_response = httpx.Response(200, json={"access_token": "test-access-token"})
        self.token_requests: list[httpx.Request] = []
        self.push_requests: list[httpx.Request] = []

    def pushed_tokens(self) -> list[str]:
        return [json.loads(req.content)["message"]["token"] for req in self.push_requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            self.token_requests.append(request)
            return self.token_response
        self.push_requests.append(request)
        token = json.loads(request.content)["message"]["token"]
        scripted = self.responses.get(token)
        if not scripted:
            return httpx.Response(200, json={"name": f"projects/{PROJECT_ID}/messages/1"})
        outcome = scripted.pop(0) if len(scripted) > 1 else scripted[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture(scope="session")
def service_account() -> dict[str, str]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    return {
        "type": "service_account",
        "project_id": PROJECT_ID,
        "private_key_id": "test-key",
        "private_key": pem,
        "client_email": f"push@{PROJECT_ID}.iam.gserviceaccount.com",
    }


@pytest.fixture()
def settings(service_account: dict[str, str]) -> Settings:
    return Settings(
        database_url=os.environ["DATABASE_URL"],
        firebase_service_account=json.dumps(service_account),
        oauth_token_url=TOKEN_URL,
        fcm_base_url=FCM_BASE_URL,
    )


@pytest.fixture()
def configured_env(
    monkeypatch: pytest.MonkeyPatch, service_account: dict[str, str]
) -> Iterator[None]:
    """Point the cached settings at the test service account."""

    monkeypatch.setenv("FIREBASE_SERVICE_ACCOUNT", json.dumps(service_account))
    monkeypatch.setenv("OAUTH_TOKEN_URL", TOKEN_URL)
    monkeypatch.setenv("FCM_BASE_URL", FCM_BASE_URL)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture(autouse=True)
def reset_database() -> Iterator[None]:
    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.initialize_database()
    yield
    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)


@pytest.fixture()
def db_session():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def add_users(db_session) -> Callable[..., None]:
    """Insert ``(user_id, token)`` pairs into the user table."""

    def _add(*users: tuple[str, str | None]) -> None:
        db_session.add_all(
            UserModel(user_id=user_id, notification_token=token) for user_id, token in users
        )
        db_session.commit()

    return _add


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


def pytest_sessionfinish(session, exitstatus):  # pragma: no cover - cleanup only
    database.engine.dispose()
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()
