"""End-to-end client auth flow against the real app."""

import httpx
import pytest
from httpx import ASGITransport

from versalles.client.auth_flow import SERVER_UNREACHABLE, AuthFlow, FlowStage
from versalles.client.portal import PortalClient


class FlakyTransport(httpx.AsyncBaseTransport):
    """Delegates to the app, but fails the listed paths at the network level."""

    def __init__(self, inner: httpx.AsyncBaseTransport, down: set[str]):
        self.inner = inner
        self.down = down

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if request.url.path in self.down:
            raise httpx.ConnectError("connection refused", request=request)
        return await self.inner.handle_async_request(request)


@pytest.fixture
def down():
    return set()


@pytest.fixture
async def portal(app, client, down):
    # ``client`` initialises the database.
    transport = FlakyTransport(ASGITransport(app=app), down)
    async with PortalClient("http://test", transport=transport) as portal:
        yield portal


@pytest.fixture
def flow(provider, portal):
    return AuthFlow(provider, portal)


async def _logged_in(portal: PortalClient) -> bool:
    resp = await portal.http.get("/api/auth/session")
    return resp.json()["data"]["isLoggedIn"]


class TestRegistrationThenLogin:
    async def test_register_logs_in(self, flow, portal, cookie_name):
        result = await flow.register("aria", "aria@example.com", "secret123", "secret123")
        assert result.success, result.message
        assert result.redirect_to == "/"
        assert cookie_name in portal.cookies
        assert await _logged_in(portal)

        me = await portal.http.get("/api/users/me")
        assert me.json()["data"]["username"] == "aria"

    async def test_login_after_logout(self, flow, portal):
        await flow.register("aria", "aria@example.com", "secret123", "secret123")
        await portal.http.delete("/api/auth/session")
        assert not await _logged_in(portal)

        result = await flow.login("aria@example.com", "secret123")
        assert result.success
        assert await _logged_in(portal)


class TestLoginSessionFailure:
    async def test_provider_ok_but_no_local_user(self, flow, portal, identity, cookie_name):
        identity.add_account("ghost@example.com", "secret123")

        result = await flow.login("ghost@example.com", "secret123")

        assert not result.success
        assert result.stage is FlowStage.SESSION
        assert result.message == "No account is registered for this identity"
        assert cookie_name not in portal.cookies
        assert not await _logged_in(portal)

    async def test_session_endpoint_unreachable(self, flow, portal, identity, down, cookie_name):
        await flow.register("aria", "aria@example.com", "secret123", "secret123")
        await portal.http.delete("/api/auth/session")
        down.add("/api/auth/session")

        result = await flow.login("aria@example.com", "secret123")

        assert result.stage is FlowStage.SESSION
        assert result.message == SERVER_UNREACHABLE
        assert cookie_name not in portal.cookies
        down.clear()
        assert not await _logged_in(portal)


class TestRegistrationUserFailure:
    async def test_taken_username_stops_before_session(self, flow, portal, identity, cookie_name):
        await portal.create_user("uid-existing", "aria", "first@example.com")

        result = await flow.register("aria", "second@example.com", "secret123", "secret123")

        assert not result.success
        assert result.stage is FlowStage.LOCAL_USER
        assert result.message == "This username is already taken"
        assert "lookup" not in identity.calls
        assert cookie_name not in portal.cookies
        # The provider account created in phase one was rolled back.
        assert "second@example.com" not in identity.accounts
        assert not result.orphaned_identity

    async def test_invalid_username_reports_first_violation(self, flow, identity):
        result = await flow.register("a", "aria@example.com", "secret123", "secret123")
        assert result.stage is FlowStage.VALIDATION
        assert result.violations[0].field == "username"
        assert identity.calls == []

    async def test_users_endpoint_unreachable(self, flow, portal, identity, down, cookie_name):
        down.add("/api/users")
        result = await flow.register("aria", "aria@example.com", "secret123", "secret123")
        assert result.stage is FlowStage.LOCAL_USER
        assert result.message == SERVER_UNREACHABLE
        assert identity.calls == ["signUp", "delete"]
        assert cookie_name not in portal.cookies
