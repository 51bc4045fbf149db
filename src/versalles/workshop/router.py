"""Workshop API router."""

from fastapi import APIRouter, Depends, Request

from versalles.common.exceptions import NotFoundError
from versalles.common.schemas import StatusResponse, success
from versalles.common.security import require_user
from versalles.common.validation import read_payload, validate_form
from versalles.users.schemas import CurrentUser
from versalles.workshop.schemas import WorkshopItemCreate, WorkshopItemResponse

router = APIRouter(prefix="/api/workshop", tags=["workshop"])


def _get_service():
    from versalles.deps import get_workshop_service
    return get_workshop_service()


def _get_db():
    from versalles.deps import get_db
    return get_db()


@router.post("/items", response_model=StatusResponse, status_code=201)
async def create_item(request: Request, user: CurrentUser = Depends(require_user)):
    body = validate_form(WorkshopItemCreate, await read_payload(request))
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        item = await svc.create_item(session, author_id=user.id, **body.model_dump())
        return success({"id": item.id}, message="Item submitted for review.")


@router.get("/items", response_model=StatusResponse)
async def list_items(user: CurrentUser = Depends(require_user)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        items = await svc.list_visible(session, user.id)
        return success([WorkshopItemResponse.from_item(i).model_dump(mode="json") for i in items])


@router.get("/items/{item_id}", response_model=StatusResponse)
async def get_item(item_id: str, user: CurrentUser = Depends(require_user)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        item = await svc.get_item(session, item_id)
        if item is None or not svc.is_visible(item, user.id):
            raise NotFoundError("Workshop item not found")
        return success(WorkshopItemResponse.from_item(item).model_dump(mode="json"))
