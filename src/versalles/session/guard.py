"""Route guard: the per-request access decision."""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from versalles.common.schemas import internal_error_response
from versalles.session.codec import SessionCodec
from versalles.session.routes import RouteClass, RouteTable, is_exempt
from versalles.session.state import SessionState

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
HOME_PATH = "/"


class GuardDecision(str, Enum):
    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect-login"
    REDIRECT_HOME = "redirect-home"


_TRANSITIONS: dict[tuple[bool, RouteClass], GuardDecision] = {
    (True, RouteClass.AUTH_ONLY): GuardDecision.REDIRECT_HOME,
    (True, RouteClass.PUBLIC): GuardDecision.ALLOW,
    (True, RouteClass.PROTECTED): GuardDecision.ALLOW,
    (False, RouteClass.AUTH_ONLY): GuardDecision.ALLOW,
    (False, RouteClass.PUBLIC): GuardDecision.ALLOW,
    (False, RouteClass.PROTECTED): GuardDecision.REDIRECT_LOGIN,
}


def decide(logged_in: bool, route_class: RouteClass) -> GuardDecision:
    return _TRANSITIONS[(bool(logged_in), RouteClass(route_class))]


def load_session(request: Request, codec: SessionCodec, refresh_after: int | None) -> SessionState:
    """Decode the request cookie into a SessionState."""
    raw = request.cookies.get(codec.policy.name)
    decoded = codec.decode_issued(raw)
    if decoded is None:
        state = SessionState()
        if raw:
            # Unreadable cookie: treat as logged out and clear it.
            state.destroy()
        return state

    data, issued_at = decoded
    state = SessionState(data, issued_at)
    if refresh_after is not None:
        age = (datetime.now(timezone.utc) - issued_at).total_seconds()
        if age >= refresh_after:
            state.touch()
    return state


def persist_session(response: Response, state: SessionState, codec: SessionCodec) -> Response:
    if state.destroyed:
        codec.clear_cookie(response)
    elif state.modified and state.data is not None:
        codec.set_cookie(response, state.data)
    return response


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """Allow, or redirect before the route ever runs."""

    def __init__(
        self,
        app,
        codec_factory: Callable[[], SessionCodec],
        table_factory: Callable[[], RouteTable],
        refresh_after: int | None = None,
    ):
        super().__init__(app)
        self._codec_factory = codec_factory
        self._table_factory = table_factory
        self._refresh_after = refresh_after

    async def dispatch(self, request, call_next):
        path = request.url.path
        if is_exempt(path):
            return await call_next(request)

        codec = self._codec_factory()
        state = load_session(request, codec, self._refresh_after)
        request.state.session = state

        route_class = self._table_factory().classify(path)
        decision = decide(state.is_logged_in, route_class)

        if decision is GuardDecision.REDIRECT_LOGIN:
            logger.debug("Redirecting anonymous request to login", extra={"path": path})
            return persist_session(RedirectResponse(LOGIN_PATH, status_code=302), state, codec)
        if decision is GuardDecision.REDIRECT_HOME:
            return persist_session(RedirectResponse(HOME_PATH, status_code=302), state, codec)

        try:
            response = await call_next(request)
        except Exception:
            # Still answer with the session changes made before the failure.
            logger.exception("Unhandled error", extra={"path": path})
            response = internal_error_response()
        return persist_session(response, state, codec)
