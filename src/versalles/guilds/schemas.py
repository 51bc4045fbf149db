"""Pydantic schemas for guild endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

DEFAULT_GUILD_AVATAR_URL = "/img/default-guild-avatar.png"


class GuildCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=50)
    tag: Optional[str] = Field(default=None, max_length=5)
    description: Optional[str] = Field(default=None, max_length=2000)
    is_private: bool = Field(
        default=False, validation_alias=AliasChoices("isPrivate", "is_private")
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("is_private", mode="before")
    @classmethod
    def coerce_flag(cls, value: Any) -> bool:
        # Forms send the checkbox as the strings "true"/"false".
        return str(value).lower() == "true"


class GuildResponse(BaseModel):
    id: str
    owner_id: str
    name: str
    tag: str = ""
    description: str = ""
    is_private: bool
    avatar_url: str = DEFAULT_GUILD_AVATAR_URL
    created_at: datetime

    @classmethod
    def from_guild(cls, guild) -> "GuildResponse":
        return cls(
            id=guild.id,
            owner_id=guild.owner_id,
            name=guild.name,
            tag=guild.tag or "",
            description=guild.description or "",
            is_private=guild.is_private,
            avatar_url=guild.avatar_url or DEFAULT_GUILD_AVATAR_URL,
            created_at=guild.created_at,
        )
