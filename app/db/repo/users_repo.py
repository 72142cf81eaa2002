from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: int) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        user_id: int,
        username: str | None,
        display_name: str | None,
    ) -> User:
        user = User(id=user_id, username=username, display_name=display_name)
        session.add(user)
        await session.flush()
        return user
