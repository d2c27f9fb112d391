from __future__ import annotations

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient

from backend.settings import reset_settings
from journal.data.api_client import ApiError, RestClient
from journal.data.storage import MemoryStorage
from journal.models import AuthResponse, Session, User

API_KEY = "test-anon-key"


class FakeRestClient:
    """In-memory stand-in for the journal API, scoped by access token."""

    def __init__(self, users=None):
        self.users = dict(users or {})
        self.calls = []
        self.failures = {}
        self.entries = {}
        self.profiles = {}
        self.quests = {}
        self.leads = []
        self._clock = 0

    def fail_with(self, method, path, status_code, detail, code=None):
        self.failures[(method, path)] = ApiError(status_code, detail, code=code)

    def _tick(self):
        self._clock += 1
        return f"2024-01-01T00:00:{self._clock:02d}+00:00"

    def request(self, method, path, params=None, json=None, access_token=None):
        self.calls.append((method, path))
        failure = self.failures.get((method, path))
        if failure is not None:
            raise failure
        parts = path.strip("/").split("/")
        resource = parts[1]
        key = parts[2] if len(parts) > 2 else None
        if resource == "leads":
            row = {"email": json["email"], "created_at": self._tick()}
            self.leads.append(row)
            return row
        user_id = self.users.get(access_token)
        if user_id is None:
            raise ApiError(401, "Missing access token")
        if resource == "entries":
            return self._entries(method, user_id, key, json)
        if resource == "profile":
            return self._profile(method, user_id, json)
        return self._quests(method, user_id, key, json)

    def _entries(self, method, user_id, day, body):
        if method == "GET":
            rows = [row for (owner, _), row in sorted(self.entries.items()) if owner == user_id]
            return {"items": rows}
        if method == "PUT":
            row = {"user_id": user_id, "date": day, **body}
            self.entries[(user_id, day)] = row
            return dict(row)
        self.entries.pop((user_id, day), None)
        return {"ok": True}

    def _profile(self, method, user_id, body):
        if method == "GET":
            if user_id not in self.profiles:
                raise ApiError(404, "Profile not found", code="not_found")
            return dict(self.profiles[user_id])
        self.profiles[user_id] = {"id": user_id, **body}
        return dict(self.profiles[user_id])

    def _quests(self, method, user_id, quest_id, body):
        if method == "GET":
            return {"items": [dict(q) for q in self.quests.values() if q["user_id"] == user_id]}
        if method == "POST":
            quest_id = f"q{len(self.quests) + 1}"
            row = {"id": quest_id, "user_id": user_id, "text": body["text"], "completed": False, "created_at": self._tick()}
            self.quests[quest_id] = row
            return dict(row)
        quest = self.quests.get(quest_id)
        owned = quest is not None and quest["user_id"] == user_id
        if method == "PATCH":
            if not owned:
                raise ApiError(404, "Quest not found", code="not_found")
            quest["completed"] = body["completed"]
            return dict(quest)
        if owned:
            del self.quests[quest_id]
        return {"ok": True}


class FakeAuth:
    is_configured = True

    def __init__(self, session=None):
        self.session = session

    async def get_session(self):
        return AuthResponse(session=self.session, user=self.session.user if self.session else None)


class _AppResponse:
    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code
        self.ok = response.is_success
        self.reason = response.reason_phrase
        self.content = response.content
        self.text = response.text

    def json(self):
        return self._response.json()


class AppSession:
    """requests.Session look-alike that sends calls into a FastAPI TestClient."""

    def __init__(self, client: TestClient):
        self.client = client

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        return _AppResponse(self.client.request(method, url, params=params, json=json, headers=headers))


def make_session(user_id="user-a", email="alice@example.com", token="token-a"):
    return Session(access_token=token, user=User(id=user_id, email=email))


@contextmanager
def _api_client(tmp_path, monkeypatch, require_confirmation=False):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'journal.db'}")
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret")
    monkeypatch.setenv("JOURNAL_API_KEY", API_KEY)
    monkeypatch.setenv("REQUIRE_EMAIL_CONFIRMATION", "true" if require_confirmation else "false")
    reset_settings()
    from backend.main import create_app

    with TestClient(create_app()) as client:
        yield client
    reset_settings()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def fake_client():
    return FakeRestClient(users={"token-a": "user-a", "token-b": "user-b"})


@pytest.fixture
def fake_auth():
    return FakeAuth(make_session())


@pytest.fixture
def other_auth():
    return FakeAuth(make_session(user_id="user-b", email="bob@example.com", token="token-b"))


@pytest.fixture
def signed_out_auth():
    return FakeAuth()


@pytest.fixture
def api(tmp_path, monkeypatch):
    with _api_client(tmp_path, monkeypatch) as client:
        yield client


@pytest.fixture
def confirming_api(tmp_path, monkeypatch):
    with _api_client(tmp_path, monkeypatch, require_confirmation=True) as client:
        yield client


@pytest.fixture
def rest_client(api):
    return RestClient("http://testserver", API_KEY, session=AppSession(api))


@pytest.fixture
def register(api):
    def _register(email, password="secret123"):
        response = api.post(
            "/auth/v1/signup",
            json={"email": email, "password": password},
            headers={"apikey": API_KEY},
        )
        assert response.status_code == 200, response.text
        token = response.json()["session"]["access_token"]
        return {"apikey": API_KEY, "Authorization": f"Bearer {token}"}

    return _register
