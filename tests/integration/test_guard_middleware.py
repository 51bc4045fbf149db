"""Integration tests for the route guard in front of the app."""

import pytest
from fastapi import Depends

from versalles.common.security import current_user
from versalles.deps import get_db, get_session_codec, get_user_service
from versalles.session.codec import SessionData


class TestAnonymous:
    async def test_public_home(self, client):
        resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.json()["data"] == {"user": None}

    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["service"] == "versalles"

    @pytest.mark.parametrize("path", ["/settings", "/settings/nested", "/api/users/me", "/forums"])
    async def test_protected_redirects_to_login(self, client, path):
        resp = await client.get(path)
        assert resp.status_code == 302
        assert resp.headers["location"] == "/login"

    async def test_protected_api_write_redirects(self, client):
        resp = await client.post("/api/campaigns", json={})
        assert resp.status_code == 302

    @pytest.mark.parametrize("path", ["/login", "/login/register"])
    async def test_auth_only_allowed(self, client, path):
        # No page is mounted there; the guard lets the request through.
        resp = await client.get(path)
        assert resp.status_code == 404

    async def test_public_subtree_allowed(self, client):
        resp = await client.get("/store/anything")
        assert resp.status_code == 404

    async def test_exempt_assets_skip_guard(self, client):
        resp = await client.get("/static/app.css")
        assert resp.status_code == 404

    async def test_forged_cookie_is_cleared(self, client, cookie_name):
        client.cookies.set(cookie_name, "forged-value")
        resp = await client.get("/about")
        set_cookie = resp.headers.get("set-cookie", "").lower()
        assert set_cookie.startswith(f"{cookie_name}=")
        assert "max-age=0" in set_cookie

    async def test_forged_cookie_on_protected_path(self, client, cookie_name):
        client.cookies.set(cookie_name, "forged-value")
        resp = await client.get("/settings")
        assert resp.status_code == 302
        assert resp.headers["location"] == "/login"


class TestLoggedIn:
    async def test_auth_only_redirects_home(self, client, signup):
        await signup()
        resp = await client.get("/login")
        assert resp.status_code == 302
        assert resp.headers["location"] == "/"
        resp = await client.get("/register")
        assert resp.headers["location"] == "/"

    async def test_protected_allowed(self, client, signup):
        await signup()
        resp = await client.get("/api/users/me")
        assert resp.status_code == 200
        assert resp.json()["data"]["username"] == "aria"

    async def test_home_shows_user(self, client, signup):
        user_id = await signup()
        resp = await client.get("/")
        assert resp.json()["data"]["user"]["id"] == user_id

    async def test_plain_request_does_not_reissue_cookie(self, client, signup):
        await signup()
        resp = await client.get("/api/users/me")
        assert "set-cookie" not in resp.headers


class TestStaleSession:
    async def test_deleted_user_session_destroyed(self, client, signup, cookie_name):
        user_id = await signup()
        async with get_db().get_session() as session:
            await get_user_service().delete_user(session, user_id)

        resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.json()["data"] == {"user": None}
        assert "max-age=0" in resp.headers["set-cookie"].lower()

        # The cookie is gone, so protected paths redirect again.
        resp = await client.get("/settings")
        assert resp.status_code == 302

    async def test_deleted_user_on_protected_api(self, client, signup):
        user_id = await signup()
        async with get_db().get_session() as session:
            await get_user_service().delete_user(session, user_id)

        resp = await client.get("/api/users/me")
        assert resp.status_code == 401
        assert "max-age=0" in resp.headers["set-cookie"].lower()

    async def test_deleted_user_session_cleared_on_server_error(self, app, client, signup):
        async def explode(user=Depends(current_user)):
            raise RuntimeError("boom")

        app.add_api_route("/explode", explode)
        user_id = await signup()
        async with get_db().get_session() as session:
            await get_user_service().delete_user(session, user_id)

        resp = await client.get("/explode")
        assert resp.status_code == 500
        assert resp.json() == {"status": "error", "message": "Internal server error"}
        assert "max-age=0" in resp.headers["set-cookie"].lower()

    async def test_cookie_for_unknown_user(self, client, cookie_name):
        cookie = get_session_codec().encode(SessionData.for_user("never-existed"))
        client.cookies.set(cookie_name, cookie)
        resp = await client.get("/")
        assert resp.json()["data"] == {"user": None}
        assert "max-age=0" in resp.headers["set-cookie"].lower()


@pytest.fixture
def refresh_immediately(monkeypatch):
    monkeypatch.setenv("VERSALLES_SESSION_REFRESH_AFTER", "0")


@pytest.mark.usefixtures("refresh_immediately")
class TestRollingRefresh:
    async def test_old_token_reissued(self, client, signup, cookie_name):
        await signup()
        resp = await client.get("/api/users/me")
        assert resp.status_code == 200
        assert resp.headers["set-cookie"].startswith(f"{cookie_name}=")
        assert "max-age=0" not in resp.headers["set-cookie"].lower()
