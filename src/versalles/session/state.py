"""Per-request session state shared by the guard, the resolver and routes."""

from datetime import datetime
from typing import Optional

from starlette.requests import Request

from versalles.session.codec import SessionData


class SessionState:
    """Mutable view of the request's session.

    Routes call ``login``/``destroy``; the route guard persists the outcome
    on the response once the route has run.
    """

    def __init__(
        self,
        data: Optional[SessionData] = None,
        issued_at: Optional[datetime] = None,
    ):
        self.data = data
        self.issued_at = issued_at
        self.modified = False
        self.destroyed = False

    @property
    def is_logged_in(self) -> bool:
        return self.data is not None and self.data.is_valid

    @property
    def user_id(self) -> Optional[str]:
        return self.data.user_id if self.is_logged_in else None

    def login(self, user_id: str) -> None:
        self.data = SessionData.for_user(user_id)
        self.modified = True
        self.destroyed = False

    def touch(self) -> None:
        """Mark a live session for re-issue (rolling refresh)."""
        if self.is_logged_in:
            self.modified = True

    def destroy(self) -> None:
        self.data = None
        self.modified = False
        self.destroyed = True


def get_session_state(request: Request) -> SessionState:
    """Return the request's SessionState, attaching an empty one if the guard did not run."""
    state = getattr(request.state, "session", None)
    if state is None:
        state = SessionState()
        request.state.session = state
    return state
