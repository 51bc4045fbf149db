"""Session-to-user resolution with staleness reconciliation."""

import asyncio
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from versalles.common.database import DatabaseManager
from versalles.session.state import SessionState
from versalles.users.schemas import CurrentUser
from versalles.users.service import UserService

logger = logging.getLogger(__name__)


class SessionUserResolver:
    """Turns a session into a hydrated CurrentUser, or None.

    Fails closed: a store outage resolves to "logged out", never to an error
    page, and a session that points at a deleted user is destroyed.
    """

    def __init__(
        self,
        db: DatabaseManager,
        users: UserService,
        timeout: float | None = 5.0,
    ):
        self.db = db
        self.users = users
        self.timeout = timeout

    async def _lookup(self, user_id: str) -> Optional[CurrentUser]:
        async with self.db.get_session() as session:
            user = await self.users.get_by_id(session, user_id)
            if user is None:
                return None
            return CurrentUser.model_validate(user)

    async def resolve(self, state: Optional[SessionState]) -> Optional[CurrentUser]:
        if state is None or not state.is_logged_in:
            return None

        user_id = state.user_id
        try:
            user = await asyncio.wait_for(self._lookup(user_id), timeout=self.timeout)
        except (SQLAlchemyError, OSError, RuntimeError, asyncio.TimeoutError):
            logger.exception(
                "Could not resolve session user; treating request as logged out",
                extra={"user_id": user_id},
            )
            return None

        if user is None:
            state.destroy()
            logger.warning(
                "Session references a missing user; session destroyed",
                extra={"user_id": user_id},
            )
            return None
        return user
