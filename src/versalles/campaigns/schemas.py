"""Pydantic schemas for campaign endpoints."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

CampaignStatus = Literal["Recrutando", "Privada", "Pausada"]


class CampaignCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    system: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=5000)
    next_session: Optional[str] = Field(default=None, max_length=100)
    status: CampaignStatus


class CampaignResponse(BaseModel):
    id: str
    gm_id: str
    title: str
    system: str
    description: str
    next_session: str = ""
    status: str
    banner_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
