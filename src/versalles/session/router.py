"""Session API router: mint, inspect and destroy the session cookie."""

import logging

from fastapi import APIRouter, Request
from pydantic import AliasChoices, BaseModel, Field

from versalles.common.exceptions import (
    AuthenticationError,
    NotFoundError,
    ServiceUnavailableError,
)
from versalles.common.schemas import StatusResponse, success
from versalles.common.validation import read_payload, validate_form
from versalles.identity.errors import IdentityProviderError, IdentityProviderUnavailable
from versalles.session.state import get_session_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["session"])


class SessionCreate(BaseModel):
    id_token: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("idToken", "identityToken")
    )


def _get_identity_provider():
    from versalles.deps import get_identity_provider
    return get_identity_provider()


def _get_user_service():
    from versalles.deps import get_user_service
    return get_user_service()


def _get_db():
    from versalles.deps import get_db
    return get_db()


@router.post("/session", response_model=StatusResponse)
async def create_session(request: Request):
    body = validate_form(SessionCreate, await read_payload(request))

    provider = _get_identity_provider()
    try:
        identity = await provider.verify_id_token(body.id_token)
    except IdentityProviderError as exc:
        logger.info("Rejected identity token", extra={"provider_code": exc.code})
        raise AuthenticationError("Invalid or expired identity token") from None
    except IdentityProviderUnavailable:
        logger.exception("Identity provider unavailable while minting a session")
        raise ServiceUnavailableError() from None

    svc = _get_user_service()
    db = _get_db()
    async with db.get_session() as session:
        user = await svc.get_by_provider_uid(session, identity.provider_user_id)
        if user is None:
            raise NotFoundError("No account is registered for this identity")
        user_id = user.id

    get_session_state(request).login(user_id)
    logger.info("Session created", extra={"user_id": user_id})
    return success()


@router.get("/session", response_model=StatusResponse)
async def read_session(request: Request):
    state = get_session_state(request)
    return success({"isLoggedIn": state.is_logged_in, "userId": state.user_id})


@router.delete("/session", response_model=StatusResponse)
async def destroy_session(request: Request):
    get_session_state(request).destroy()
    return success()
