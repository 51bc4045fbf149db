"""Guild API router."""

from fastapi import APIRouter, Depends, Request

from versalles.common.exceptions import NotFoundError
from versalles.common.schemas import StatusResponse, success
from versalles.common.security import require_user
from versalles.common.validation import read_payload, validate_form
from versalles.guilds.schemas import GuildCreate, GuildResponse
from versalles.users.schemas import CurrentUser

router = APIRouter(prefix="/api/guilds", tags=["guilds"])


def _get_service():
    from versalles.deps import get_guild_service
    return get_guild_service()


def _get_db():
    from versalles.deps import get_db
    return get_db()


@router.post("", response_model=StatusResponse, status_code=201)
async def create_guild(request: Request, user: CurrentUser = Depends(require_user)):
    body = validate_form(GuildCreate, await read_payload(request))
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        guild = await svc.create_guild(session, owner_id=user.id, **body.model_dump())
        return success({"guildId": guild.id})


@router.get("", response_model=StatusResponse)
async def list_guilds(_: CurrentUser = Depends(require_user)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        guilds = await svc.list_public_guilds(session)
        return success([GuildResponse.from_guild(g).model_dump(mode="json") for g in guilds])


@router.get("/{guild_id}", response_model=StatusResponse)
async def get_guild(guild_id: str, user: CurrentUser = Depends(require_user)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        guild = await svc.get_guild(session, guild_id)
        if guild is None or (guild.is_private and guild.owner_id != user.id):
            raise NotFoundError("Guild not found")
        return success(GuildResponse.from_guild(guild).model_dump(mode="json"))
