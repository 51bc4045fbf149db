"""Shared test fixtures for Versalles."""

import itertools
import json
from urllib.parse import parse_qs

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

SESSION_SECRET = "test-session-secret-with-at-least-32-bytes"
IDENTITY_API_KEY = "test-identity-api-key"
IDENTITY_URL = "http://identity.test"
SECURETOKEN_URL = "http://securetoken.test"


def _error(message: str, status: int = 400) -> httpx.Response:
    return httpx.Response(status, json={"error": {"code": status, "message": message}})


class FakeIdentityToolkit:
    """In-memory stand-in for the identity provider's REST API."""

    def __init__(self):
        self.accounts: dict[str, dict] = {}  # email -> {"localId", "password"}
        self.tokens: dict[str, str] = {}  # idToken -> localId
        self.refresh_tokens: dict[str, str] = {}  # refreshToken -> localId
        self.deleted: list[str] = []
        self.calls: list[str] = []
        self.fail_delete = False
        self._ids = itertools.count(1)

    def add_account(self, email: str, password: str = "secret123") -> str:
        local_id = f"uid-{next(self._ids)}"
        self.accounts[email.lower()] = {"localId": local_id, "password": password}
        return local_id

    def issue_token(self, local_id: str) -> str:
        token = f"id-token-{local_id}-{next(self._ids)}"
        self.tokens[token] = local_id
        return token

    def _email_of(self, local_id: str) -> str:
        for email, account in self.accounts.items():
            if account["localId"] == local_id:
                return email
        return ""

    def _credential(self, local_id: str) -> httpx.Response:
        refresh = f"refresh-{local_id}-{next(self._ids)}"
        self.refresh_tokens[refresh] = local_id
        return httpx.Response(200, json={
            "localId": local_id,
            "email": self._email_of(local_id),
            "idToken": self.issue_token(local_id),
            "refreshToken": refresh,
            "expiresIn": "3600",
        })

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.params.get("key") != IDENTITY_API_KEY:
            return _error("API key not valid. Please pass a valid API key.")

        if request.url.host == "securetoken.test":
            self.calls.append("token")
            form = parse_qs(request.content.decode())
            local_id = self.refresh_tokens.get(form.get("refresh_token", [""])[0])
            if local_id is None:
                return _error("INVALID_REFRESH_TOKEN")
            return httpx.Response(200, json={
                "id_token": self.issue_token(local_id),
                "refresh_token": form["refresh_token"][0],
                "expires_in": "3600",
            })

        action = request.url.path.rsplit(":", 1)[-1]
        self.calls.append(action)
        body = json.loads(request.content or b"{}")

        if action == "signInWithPassword":
            account = self.accounts.get(str(body.get("email", "")).lower())
            if account is None or account["password"] != body.get("password"):
                return _error("INVALID_LOGIN_CREDENTIALS")
            return self._credential(account["localId"])

        if action == "signUp":
            email = str(body.get("email", "")).lower()
            if "@" not in email:
                return _error("INVALID_EMAIL")
            if email in self.accounts:
                return _error("EMAIL_EXISTS")
            if len(body.get("password", "")) < 6:
                return _error("WEAK_PASSWORD : Password should be at least 6 characters")
            return self._credential(self.add_account(email, body["password"]))

        if action == "lookup":
            local_id = self.tokens.get(body.get("idToken", ""))
            if local_id is None:
                return _error("INVALID_ID_TOKEN")
            return httpx.Response(200, json={
                "users": [{"localId": local_id, "email": self._email_of(local_id)}],
            })

        if action == "delete":
            if self.fail_delete:
                return httpx.Response(503, text="unavailable")
            local_id = self.tokens.get(body.get("idToken", ""))
            if local_id is None:
                return _error("INVALID_ID_TOKEN")
            self.accounts.pop(self._email_of(local_id), None)
            self.deleted.append(local_id)
            return httpx.Response(200, json={})

        return _error("NOT_FOUND", status=404)


@pytest.fixture
def identity():
    return FakeIdentityToolkit()


@pytest.fixture
def provider(identity):
    from versalles.identity.provider import IdentityProviderClient

    return IdentityProviderClient(
        api_key=IDENTITY_API_KEY,
        base_url=IDENTITY_URL,
        securetoken_url=SECURETOKEN_URL,
        transport=httpx.MockTransport(identity.handler),
    )


@pytest.fixture
def app(provider, monkeypatch):
    """Create a test app with in-memory DB and a fake identity provider."""
    monkeypatch.setenv("VERSALLES_ENVIRONMENT", "development")
    monkeypatch.setenv("VERSALLES_DB_URL", "sqlite+aiosqlite://")
    monkeypatch.setenv("VERSALLES_SESSION_SECRET", SESSION_SECRET)
    monkeypatch.setenv("VERSALLES_IDENTITY_API_KEY", IDENTITY_API_KEY)
    monkeypatch.setenv("VERSALLES_LOG_JSON", "false")

    # Clear caches and singletons so new env vars take effect
    from versalles.common.config import get_settings
    get_settings.cache_clear()

    from versalles.deps import reset_singletons, set_identity_provider
    reset_singletons()
    set_identity_provider(provider)

    from versalles.app import create_app
    return create_app()


@pytest.fixture
async def client(app):
    # Manually init DB since ASGITransport doesn't run lifespan
    from versalles.deps import get_db
    db = get_db()
    await db.init()
    await db.create_all()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()


@pytest.fixture
def cookie_name():
    return "versalles-session"


@pytest.fixture
def signup(client, identity):
    """Register a local user and log the client in; returns the user id."""

    async def _signup(username="aria", email=None, password="secret123"):
        email = email or f"{username}@example.com"
        uid = identity.add_account(email, password)
        resp = await client.post("/api/users", json={
            "uid": uid, "username": username, "email": email,
        })
        assert resp.status_code == 201, resp.text
        resp = await client.post(
            "/api/auth/session", json={"idToken": identity.issue_token(uid)}
        )
        assert resp.status_code == 200, resp.text
        return (await client.get("/api/auth/session")).json()["data"]["userId"]

    return _signup
