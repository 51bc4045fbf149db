"""Tests for session.guard: decision table and session persistence."""

from datetime import datetime, timedelta, timezone

import pytest
from starlette.requests import Request
from starlette.responses import Response

from versalles.session.codec import CookiePolicy, SessionCodec, SessionData
from versalles.session.guard import GuardDecision, decide, load_session, persist_session
from versalles.session.routes import RouteClass
from versalles.session.state import SessionState

SECRET = "unit-test-session-secret-0123456789abcdef"


@pytest.fixture
def codec():
    return SessionCodec(SECRET, ttl=3600, policy=CookiePolicy(secure=False))


def _request(cookie: str | None = None) -> Request:
    headers = []
    if cookie is not None:
        headers.append((b"cookie", f"versalles-session={cookie}".encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


class TestDecide:
    @pytest.mark.parametrize("logged_in,route_class,expected", [
        (False, RouteClass.PROTECTED, GuardDecision.REDIRECT_LOGIN),
        (True, RouteClass.AUTH_ONLY, GuardDecision.REDIRECT_HOME),
        (False, RouteClass.AUTH_ONLY, GuardDecision.ALLOW),
        (False, RouteClass.PUBLIC, GuardDecision.ALLOW),
        (True, RouteClass.PUBLIC, GuardDecision.ALLOW),
        (True, RouteClass.PROTECTED, GuardDecision.ALLOW),
    ])
    def test_transition_table(self, logged_in, route_class, expected):
        assert decide(logged_in, route_class) is expected

    def test_accepts_string_class(self):
        assert decide(False, "protected") is GuardDecision.REDIRECT_LOGIN


class TestLoadSession:
    def test_no_cookie(self, codec):
        state = load_session(_request(), codec, refresh_after=None)
        assert not state.is_logged_in
        assert not state.destroyed

    def test_valid_cookie(self, codec):
        cookie = codec.encode(SessionData.for_user("u1"))
        state = load_session(_request(cookie), codec, refresh_after=None)
        assert state.user_id == "u1"
        assert not state.modified

    def test_garbage_cookie_is_cleared(self, codec):
        state = load_session(_request("forged"), codec, refresh_after=None)
        assert not state.is_logged_in
        assert state.destroyed

    def test_old_token_marked_for_refresh(self, codec):
        cookie = codec.encode(SessionData.for_user("u1"))
        state = load_session(_request(cookie), codec, refresh_after=0)
        assert state.is_logged_in
        assert state.modified


class TestPersistSession:
    def test_untouched_state_sets_nothing(self, codec):
        state = SessionState(SessionData.for_user("u1"), datetime.now(timezone.utc))
        response = persist_session(Response(), state, codec)
        assert "set-cookie" not in response.headers

    def test_login_sets_cookie(self, codec):
        state = SessionState()
        state.login("u2")
        response = persist_session(Response(), state, codec)
        value = response.headers["set-cookie"].split(";", 1)[0].split("=", 1)[1].strip('"')
        assert codec.decode(value) == SessionData.for_user("u2")

    def test_destroy_clears_cookie(self, codec):
        state = SessionState(SessionData.for_user("u1"), datetime.now(timezone.utc) - timedelta(hours=1))
        state.destroy()
        response = persist_session(Response(), state, codec)
        assert "max-age=0" in response.headers["set-cookie"].lower()

    def test_login_after_destroy_wins(self, codec):
        state = SessionState()
        state.destroy()
        state.login("u3")
        response = persist_session(Response(), state, codec)
        assert "max-age=0" not in response.headers["set-cookie"].lower()
