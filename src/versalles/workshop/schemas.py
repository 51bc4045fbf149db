"""Pydantic schemas for workshop endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_PREVIEW_URL = "https://placehold.co/600x400/0a0f1e/E8C468?text=Preview"


class WorkshopItemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=150)
    description: str = Field(..., min_length=10, max_length=10000)
    system: str = Field(..., min_length=1, max_length=50)
    type: str = Field(..., min_length=1, max_length=50)
    price: Optional[float] = Field(default=None, ge=0)

    @field_validator("price", mode="before")
    @classmethod
    def blank_price(cls, value: Any) -> Any:
        # An empty form field means "free".
        if isinstance(value, str) and not value.strip():
            return None
        return value


class WorkshopItemResponse(BaseModel):
    id: str
    author_id: str
    title: str
    description: str
    system: str
    type: str
    price: Optional[float] = None
    status: str
    preview_url: str = DEFAULT_PREVIEW_URL
    created_at: datetime

    @classmethod
    def from_item(cls, item) -> "WorkshopItemResponse":
        return cls(
            id=item.id,
            author_id=item.author_id,
            title=item.title,
            description=item.description,
            system=item.system,
            type=item.type,
            price=item.price,
            status=item.status,
            preview_url=item.preview_url or DEFAULT_PREVIEW_URL,
            created_at=item.created_at,
        )
