"""Forum API router."""

from fastapi import APIRouter, Depends, Request

from versalles.common.exceptions import NotFoundError
from versalles.common.schemas import StatusResponse, success
from versalles.common.security import require_user
from versalles.common.validation import read_payload, validate_form
from versalles.forums.schemas import (
    PostCreate,
    PostResponse,
    ThreadCreate,
    ThreadDetail,
    ThreadSummary,
)
from versalles.users.schemas import CurrentUser

router = APIRouter(prefix="/api", tags=["forums"])


def _get_service():
    from versalles.deps import get_forum_service
    return get_forum_service()


def _get_db():
    from versalles.deps import get_db
    return get_db()


@router.get("/forums", response_model=StatusResponse)
async def list_forums(_: CurrentUser = Depends(require_user)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        categories = await svc.list_categories(session)
        return success([c.model_dump(mode="json") for c in categories])


@router.get("/forums/{forum_id}/threads", response_model=StatusResponse)
async def list_threads(forum_id: str, _: CurrentUser = Depends(require_user)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        if await svc.get_forum(session, forum_id) is None:
            raise NotFoundError("Forum not found")
        threads = await svc.list_threads(session, forum_id)
        return success([
            ThreadSummary.model_validate(t).model_dump(mode="json") for t in threads
        ])


@router.post("/forums/{forum_id}/threads", response_model=StatusResponse, status_code=201)
async def create_thread(
    forum_id: str, request: Request, user: CurrentUser = Depends(require_user)
):
    body = validate_form(ThreadCreate, await read_payload(request))
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        if await svc.get_forum(session, forum_id) is None:
            raise NotFoundError("Forum not found")
        thread = await svc.create_thread(
            session, forum_id, author_id=user.id, title=body.title, content=body.content
        )
        return success({"threadId": thread.id})


@router.get("/threads/{thread_id}", response_model=StatusResponse)
async def get_thread(thread_id: str, _: CurrentUser = Depends(require_user)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        thread = await svc.get_thread(session, thread_id)
        if thread is None:
            raise NotFoundError("Thread not found")
        posts = await svc.list_posts(session, thread_id)
        detail = ThreadDetail(
            **ThreadSummary.model_validate(thread).model_dump(),
            posts=[PostResponse.model_validate(p) for p in posts],
        )
        return success(detail.model_dump(mode="json"))


@router.post("/threads/{thread_id}/posts", response_model=StatusResponse, status_code=201)
async def create_post(
    thread_id: str, request: Request, user: CurrentUser = Depends(require_user)
):
    body = validate_form(PostCreate, await read_payload(request))
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        if await svc.get_thread(session, thread_id) is None:
            raise NotFoundError("Thread not found")
        post = await svc.add_post(session, thread_id, author_id=user.id, content=body.content)
        return success({"id": post.id})
