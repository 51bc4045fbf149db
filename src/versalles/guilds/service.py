"""Guild CRUD service."""

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from versalles.common.exceptions import ConflictError
from versalles.guilds.models import GuildModel

GUILDS_PER_PAGE = 20
DUPLICATE_NAME = "A guild with this name already exists"


class GuildService:
    async def create_guild(
        self,
        session: AsyncSession,
        owner_id: str,
        name: str,
        tag: str | None = None,
        description: str | None = None,
        is_private: bool = False,
    ) -> GuildModel:
        existing = await session.execute(
            select(GuildModel.id).where(func.lower(GuildModel.name) == name.lower())
        )
        if existing.first() is not None:
            raise ConflictError(DUPLICATE_NAME)

        guild = GuildModel(
            owner_id=owner_id,
            name=name,
            tag=(tag or "").upper(),
            description=description or "",
            is_private=is_private,
        )
        session.add(guild)
        try:
            await session.flush()
        except IntegrityError:
            raise ConflictError(DUPLICATE_NAME) from None
        return guild

    async def get_guild(self, session: AsyncSession, guild_id: str) -> GuildModel | None:
        return await session.get(GuildModel, guild_id)

    async def list_public_guilds(
        self, session: AsyncSession, limit: int = GUILDS_PER_PAGE
    ) -> list[GuildModel]:
        result = await session.execute(
            select(GuildModel)
            .where(GuildModel.is_private.is_(False))
            .order_by(GuildModel.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
