"""Campaign CRUD service."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from versalles.campaigns.models import CampaignModel

CAMPAIGNS_PER_PAGE = 20


class CampaignService:
    async def create_campaign(
        self,
        session: AsyncSession,
        gm_id: str,
        title: str,
        system: str,
        description: str,
        status: str,
        next_session: str | None = None,
    ) -> CampaignModel:
        campaign = CampaignModel(
            gm_id=gm_id,
            title=title,
            system=system,
            description=description,
            status=status,
            next_session=next_session or "",
        )
        session.add(campaign)
        await session.flush()
        return campaign

    async def get_campaign(
        self, session: AsyncSession, campaign_id: str
    ) -> CampaignModel | None:
        return await session.get(CampaignModel, campaign_id)

    async def list_for_gm(
        self, session: AsyncSession, gm_id: str, limit: int = CAMPAIGNS_PER_PAGE
    ) -> list[CampaignModel]:
        result = await session.execute(
            select(CampaignModel)
            .where(CampaignModel.gm_id == gm_id)
            .order_by(CampaignModel.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
