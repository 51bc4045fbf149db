"""Pydantic schemas for user endpoints and forms."""

from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, StringConstraints

DEFAULT_AVATAR_URL = "/img/default-avatar.png"

Username = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=3, max_length=20, pattern=r"^[a-zA-Z0-9_]+$"),
]

Clan = Literal["Triskelion", "Versalles", "Targaryen", ""]


class RegisterUser(BaseModel):
    """Body of POST /api/users, sent after the provider account exists."""

    uid: str = Field(..., min_length=1, max_length=128)
    username: Username
    email: EmailStr


class UpdateProfile(BaseModel):
    bio: Optional[str] = Field(default=None, max_length=1000)
    clan: Optional[Clan] = None
    genre: Optional[str] = Field(default=None, max_length=50)


class CurrentUser(BaseModel):
    """Hydrated projection of the logged-in user handed to request handlers."""

    id: str
    provider_uid: str
    username: str
    email: str
    bio: str = ""
    clan: str = ""
    genre: str = ""
    avatar_url: Optional[str] = None
    banner_url: Optional[str] = None
    background_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileResponse(BaseModel):
    """What other members can see of a user."""

    id: str
    username: str
    bio: str = ""
    clan: str = ""
    genre: str = ""
    avatar_url: str = DEFAULT_AVATAR_URL
    banner_url: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_user(cls, user) -> "ProfileResponse":
        return cls(
            id=user.id,
            username=user.username,
            bio=user.bio or "",
            clan=user.clan or "",
            genre=user.genre or "",
            avatar_url=user.avatar_url or DEFAULT_AVATAR_URL,
            banner_url=user.banner_url,
            created_at=user.created_at,
        )
