"""Client auth flow: identity provider first, then the portal session.

Login:        validate -> provider sign-in -> session mint
Registration: validate -> provider sign-up -> local user -> session mint

Phases run strictly in order and each failure stops the flow with a
user-facing message. When the local user cannot be created after the
provider account was, the flow deletes the provider account again; if
that delete fails too, the result is flagged ``orphaned_identity``.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from versalles.client.forms import LoginForm, RegisterForm
from versalles.client.portal import PortalClient, PortalResult
from versalles.common.validation import Violation, collect_violations
from versalles.identity.errors import (
    IdentityProviderError,
    IdentityProviderUnavailable,
    login_message,
    register_message,
)
from versalles.identity.provider import IdentityCredential, IdentityProviderClient

logger = logging.getLogger(__name__)

ALREADY_IN_PROGRESS = "A submission is already in progress."
SERVER_UNREACHABLE = "Could not connect to the server."
SESSION_FAILED_LOGIN = "Failed to create the session on the server."
SESSION_FAILED_REGISTER = "Could not start your session after registering."
USER_FAILED = "Failed to register the user on the server."


class FlowStage(str, Enum):
    SUBMISSION = "submission"
    VALIDATION = "validation"
    IDENTITY = "identity"
    LOCAL_USER = "local_user"
    SESSION = "session"
    COMPLETE = "complete"


@dataclass
class AuthFlowResult:
    success: bool
    stage: FlowStage
    message: Optional[str] = None
    violations: list[Violation] = field(default_factory=list)
    redirect_to: Optional[str] = None
    orphaned_identity: bool = False


def _portal_message(result: PortalResult, fallback: str) -> str:
    if result.network_error:
        return SERVER_UNREACHABLE
    return result.message or fallback


class AuthFlow:
    """Single-flight login/registration orchestration for one client."""

    def __init__(
        self,
        provider: IdentityProviderClient,
        portal: PortalClient,
        home_path: str = "/",
    ):
        self.provider = provider
        self.portal = portal
        self.home_path = home_path
        self._lock = asyncio.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    async def login(self, email: str, password: str) -> AuthFlowResult:
        if self._lock.locked():
            return AuthFlowResult(False, FlowStage.SUBMISSION, ALREADY_IN_PROGRESS)
        async with self._lock:
            return await self._login(email, password)

    async def register(
        self, username: str, email: str, password: str, confirm_password: str
    ) -> AuthFlowResult:
        if self._lock.locked():
            return AuthFlowResult(False, FlowStage.SUBMISSION, ALREADY_IN_PROGRESS)
        async with self._lock:
            return await self._register(username, email, password, confirm_password)

    # ── Phases ──

    async def _login(self, email: str, password: str) -> AuthFlowResult:
        violations = collect_violations(LoginForm, {"email": email, "password": password})
        if violations:
            return AuthFlowResult(
                False, FlowStage.VALIDATION, violations[0].message, violations=violations
            )

        try:
            credential = await self.provider.sign_in(email, password)
        except (IdentityProviderError, IdentityProviderUnavailable) as exc:
            logger.info("Provider sign-in failed", extra={"error_type": type(exc).__name__})
            return AuthFlowResult(False, FlowStage.IDENTITY, login_message(exc))

        return await self._mint_session(credential, SESSION_FAILED_LOGIN)

    async def _register(
        self, username: str, email: str, password: str, confirm_password: str
    ) -> AuthFlowResult:
        violations = collect_violations(RegisterForm, {
            "username": username,
            "email": email,
            "password": password,
            "confirm_password": confirm_password,
        })
        if violations:
            return AuthFlowResult(
                False, FlowStage.VALIDATION, violations[0].message, violations=violations
            )

        try:
            credential = await self.provider.sign_up(email, password)
        except (IdentityProviderError, IdentityProviderUnavailable) as exc:
            logger.info("Provider sign-up failed", extra={"error_type": type(exc).__name__})
            return AuthFlowResult(False, FlowStage.IDENTITY, register_message(exc))

        created = await self.portal.create_user(
            credential.provider_user_id, username.strip(), email
        )
        if not created.ok:
            orphaned = not await self._compensate(credential)
            return AuthFlowResult(
                False,
                FlowStage.LOCAL_USER,
                _portal_message(created, USER_FAILED),
                orphaned_identity=orphaned,
            )

        return await self._mint_session(credential, SESSION_FAILED_REGISTER)

    async def _mint_session(
        self, credential: IdentityCredential, fallback: str
    ) -> AuthFlowResult:
        try:
            id_token = await self.provider.fresh_id_token(credential)
        except (IdentityProviderError, IdentityProviderUnavailable) as exc:
            return AuthFlowResult(False, FlowStage.SESSION, login_message(exc))

        minted = await self.portal.create_session(id_token)
        if not minted.ok:
            return AuthFlowResult(False, FlowStage.SESSION, _portal_message(minted, fallback))
        return AuthFlowResult(True, FlowStage.COMPLETE, redirect_to=self.home_path)

    async def _compensate(self, credential: IdentityCredential) -> bool:
        """Delete the provider account whose local record could not be created."""
        try:
            await self.provider.delete_account(credential.id_token)
        except (IdentityProviderError, IdentityProviderUnavailable):
            logger.error(
                "Orphaned identity-provider account needs manual cleanup",
                extra={"provider_user_id": credential.provider_user_id},
            )
            return False
        logger.info(
            "Rolled back identity-provider account after local user failure",
            extra={"provider_user_id": credential.provider_user_id},
        )
        return True
