"""User API router: account creation and profiles."""

from fastapi import APIRouter, Depends, Request

from versalles.common.exceptions import NotFoundError
from versalles.common.schemas import StatusResponse, success
from versalles.common.security import require_user
from versalles.common.validation import read_payload, validate_form
from versalles.users.schemas import (
    CurrentUser,
    ProfileResponse,
    RegisterUser,
    UpdateProfile,
)

router = APIRouter(prefix="/api", tags=["users"])


def _get_service():
    from versalles.deps import get_user_service
    return get_user_service()


def _get_db():
    from versalles.deps import get_db
    return get_db()


@router.post("/users", response_model=StatusResponse, status_code=201)
async def create_user(request: Request):
    body = validate_form(RegisterUser, await read_payload(request))
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        user = await svc.create_user(
            session,
            provider_uid=body.uid,
            username=body.username,
            email=str(body.email),
        )
        return success({"id": user.id, "username": user.username})


@router.get("/users/me", response_model=StatusResponse)
async def get_me(user: CurrentUser = Depends(require_user)):
    return success(user.model_dump(mode="json"))


@router.put("/users/me", response_model=StatusResponse)
async def update_me(request: Request, user: CurrentUser = Depends(require_user)):
    body = validate_form(UpdateProfile, await read_payload(request))
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        updated = await svc.update_profile(
            session, user.id, **body.model_dump(exclude_none=True)
        )
        if updated is None:
            raise NotFoundError("User not found")
        return success(ProfileResponse.from_user(updated).model_dump(mode="json"))


@router.get("/profiles/{username}", response_model=StatusResponse)
async def get_profile(username: str, _: CurrentUser = Depends(require_user)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        user = await svc.get_by_username(session, username)
        if user is None:
            raise NotFoundError("Profile not found")
        return success(ProfileResponse.from_user(user).model_dump(mode="json"))
