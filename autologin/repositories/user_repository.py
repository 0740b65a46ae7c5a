from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autologin.models.user import User
from autologin.repositories.base import BaseRepository, storage_errors


class UserRepository(BaseRepository[User]):
    """Repository for User model operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    @storage_errors
    async def get_active_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID if the account is active."""
        result = await self.db.execute(
            select(User).filter(
                User.id == user_id,
                User.is_active == True  # noqa: E712
            )
        )
        return result.scalar_one_or_none()
