"""SQLAlchemy model for workshop items."""

from typing import Optional

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from versalles.common.models import Base, TimestampMixin, generate_uuid

ITEM_PENDING = "pending"
ITEM_APPROVED = "approved"
ITEM_REJECTED = "rejected"


class WorkshopItemModel(Base, TimestampMixin):
    __tablename__ = "workshop_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    system: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    price: Mapped[Optional[float]] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=ITEM_PENDING, index=True)
    preview_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
