"""Current-user request dependencies."""

from fastapi import Depends
from starlette.requests import Request

from versalles.common.exceptions import AuthenticationError
from versalles.session.state import get_session_state
from versalles.users.schemas import CurrentUser

_UNRESOLVED = object()


async def current_user(request: Request) -> CurrentUser | None:
    """FastAPI dependency returning the logged-in user or None.

    Resolved at most once per request.
    """
    cached = getattr(request.state, "current_user", _UNRESOLVED)
    if cached is not _UNRESOLVED:
        return cached

    from versalles.deps import get_user_resolver

    user = await get_user_resolver().resolve(get_session_state(request))
    request.state.current_user = user
    return user


async def require_user(user: CurrentUser | None = Depends(current_user)) -> CurrentUser:
    """FastAPI dependency that rejects requests without a valid user."""
    if user is None:
        raise AuthenticationError()
    return user
