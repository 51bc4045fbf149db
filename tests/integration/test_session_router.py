"""Integration tests for /api/auth/session."""

import httpx

from versalles.deps import get_identity_provider


class TestCreateSession:
    async def _create_user(self, client, identity, username="aria"):
        uid = identity.add_account(f"{username}@example.com")
        resp = await client.post("/api/users", json={
            "uid": uid, "username": username, "email": f"{username}@example.com",
        })
        assert resp.status_code == 201
        return uid

    async def test_mint_sets_cookie(self, client, identity, cookie_name):
        uid = await self._create_user(client, identity)
        resp = await client.post("/api/auth/session", json={"idToken": identity.issue_token(uid)})
        assert resp.status_code == 200
        assert resp.json()["status"] == "success"
        set_cookie = resp.headers["set-cookie"].lower()
        assert set_cookie.startswith(f"{cookie_name}=")
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie
        # Development environment: plain HTTP allowed.
        assert "secure" not in set_cookie

    async def test_mint_from_form_body(self, client, identity):
        uid = await self._create_user(client, identity)
        resp = await client.post(
            "/api/auth/session", data={"identityToken": identity.issue_token(uid)}
        )
        assert resp.status_code == 200

    async def test_session_readback(self, client, identity):
        uid = await self._create_user(client, identity)
        await client.post("/api/auth/session", json={"idToken": identity.issue_token(uid)})
        data = (await client.get("/api/auth/session")).json()["data"]
        assert data["isLoggedIn"] is True
        assert data["userId"]

    async def test_invalid_token(self, client):
        resp = await client.post("/api/auth/session", json={"idToken": "forged"})
        assert resp.status_code == 401
        assert resp.json()["status"] == "error"
        assert "set-cookie" not in resp.headers

    async def test_missing_token(self, client):
        resp = await client.post("/api/auth/session", json={})
        assert resp.status_code == 422
        body = resp.json()
        assert body["violations"][0]["field"] == "idToken"
        assert body["message"] == body["violations"][0]["message"]

    async def test_unknown_identity(self, client, identity):
        uid = identity.add_account("ghost@example.com")
        resp = await client.post("/api/auth/session", json={"idToken": identity.issue_token(uid)})
        assert resp.status_code == 404
        assert resp.json()["message"] == "No account is registered for this identity"
        assert "set-cookie" not in resp.headers

    async def test_provider_down(self, client):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        provider = get_identity_provider()
        await provider.close()
        provider._transport = httpx.MockTransport(handler)

        resp = await client.post("/api/auth/session", json={"idToken": "t"})
        assert resp.status_code == 503
        assert resp.json()["message"] == "Service temporarily unavailable, try again"


class TestReadAndDestroy:
    async def test_anonymous_readback(self, client):
        data = (await client.get("/api/auth/session")).json()["data"]
        assert data == {"isLoggedIn": False, "userId": None}

    async def test_logout(self, client, signup, cookie_name):
        await signup()
        resp = await client.delete("/api/auth/session")
        assert resp.status_code == 200
        assert "max-age=0" in resp.headers["set-cookie"].lower()
        assert cookie_name not in client.cookies

        resp = await client.get("/api/users/me")
        assert resp.status_code == 302
