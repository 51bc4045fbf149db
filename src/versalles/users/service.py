"""User CRUD service."""

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from versalles.common.exceptions import ConflictError
from versalles.users.models import UserModel


# Column named in the unique-constraint error, in check order.
_CONFLICT_MESSAGES = (
    ("provider_uid", "This account is already registered"),
    ("username", "This username is already taken"),
    ("email", "This email is already in use"),
)


def _conflict_message(detail: str) -> str:
    for column, message in _CONFLICT_MESSAGES:
        if column in detail:
            return message
    return "This account is already registered"


class UserService:
    """Local user records keyed to identity-provider accounts."""

    async def create_user(
        self,
        session: AsyncSession,
        provider_uid: str,
        username: str,
        email: str,
    ) -> UserModel:
        email = email.strip().lower()
        result = await session.execute(
            select(UserModel).where(
                or_(
                    UserModel.provider_uid == provider_uid,
                    func.lower(UserModel.username) == username.lower(),
                    UserModel.email == email,
                )
            )
        )
        for existing in result.scalars().all():
            if existing.provider_uid == provider_uid:
                raise ConflictError("This account is already registered")
            if existing.username.lower() == username.lower():
                raise ConflictError("This username is already taken")
            raise ConflictError("This email is already in use")

        user = UserModel(provider_uid=provider_uid, username=username, email=email)
        session.add(user)
        try:
            await session.flush()
        except IntegrityError as exc:
            # A concurrent registration won the race past the check above.
            raise ConflictError(_conflict_message(str(exc.orig))) from None
        return user

    async def get_by_id(self, session: AsyncSession, user_id: str) -> UserModel | None:
        return await session.get(UserModel, user_id)

    async def get_by_provider_uid(
        self, session: AsyncSession, provider_uid: str
    ) -> UserModel | None:
        result = await session.execute(
            select(UserModel).where(UserModel.provider_uid == provider_uid)
        )
        return result.scalar_one_or_none()

    async def get_by_username(
        self, session: AsyncSession, username: str
    ) -> UserModel | None:
        result = await session.execute(
            select(UserModel).where(func.lower(UserModel.username) == username.lower())
        )
        return result.scalar_one_or_none()

    async def update_profile(
        self, session: AsyncSession, user_id: str, **updates
    ) -> UserModel | None:
        user = await self.get_by_id(session, user_id)
        if user is None:
            return None
        for field in ("bio", "clan", "genre"):
            if field in updates and updates[field] is not None:
                setattr(user, field, updates[field])
        await session.flush()
        return user

    async def delete_user(self, session: AsyncSession, user_id: str) -> bool:
        user = await self.get_by_id(session, user_id)
        if user is None:
            return False
        await session.delete(user)
        await session.flush()
        return True
