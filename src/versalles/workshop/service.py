"""Workshop item service. New items wait for moderation."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from versalles.workshop.models import ITEM_APPROVED, ITEM_PENDING, WorkshopItemModel

ITEMS_PER_PAGE = 12


class WorkshopService:
    async def create_item(
        self,
        session: AsyncSession,
        author_id: str,
        title: str,
        description: str,
        system: str,
        type: str,
        price: float | None = None,
    ) -> WorkshopItemModel:
        item = WorkshopItemModel(
            author_id=author_id,
            title=title,
            description=description,
            system=system,
            type=type,
            price=price,
            status=ITEM_PENDING,
        )
        session.add(item)
        await session.flush()
        return item

    async def get_item(self, session: AsyncSession, item_id: str) -> WorkshopItemModel | None:
        return await session.get(WorkshopItemModel, item_id)

    def is_visible(self, item: WorkshopItemModel, viewer_id: str) -> bool:
        return item.status == ITEM_APPROVED or item.author_id == viewer_id

    async def list_visible(
        self, session: AsyncSession, viewer_id: str
    ) -> list[WorkshopItemModel]:
        """Approved items plus the viewer's own, newest first."""
        result = await session.execute(
            select(WorkshopItemModel)
            .where(or_(
                WorkshopItemModel.status == ITEM_APPROVED,
                WorkshopItemModel.author_id == viewer_id,
            ))
            .order_by(WorkshopItemModel.created_at.desc())
            .limit(ITEMS_PER_PAGE)
        )
        return list(result.scalars().all())
