"""SQLAlchemy model for users."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from versalles.common.models import Base, TimestampMixin, generate_uuid


class UserModel(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    provider_uid: Mapped[str] = mapped_column(
        String(128), unique=True, nullable=False, index=True
    )
    username: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    bio: Mapped[str] = mapped_column(Text, default="")
    clan: Mapped[str] = mapped_column(String(50), default="")
    genre: Mapped[str] = mapped_column(String(50), default="")
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    banner_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    background_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
