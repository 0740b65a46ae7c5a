"""Repository for AutologinToken model operations."""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from autologin.core.exceptions import StorageError, TokenCollisionError
from autologin.models.autologin_token import AutologinToken
from autologin.repositories.base import BaseRepository, storage_errors


# Unique index created for AutologinToken.token (index=True, unique=True)
TOKEN_UNIQUE_INDEX = "ix_autologin_tokens_token"
TOKEN_COLUMN = "autologin_tokens.token"


def _is_token_collision(error: IntegrityError) -> bool:
    # asyncpg reports the violated constraint on the driver exception
    driver_error = getattr(error.orig, "__cause__", None) or error.orig
    constraint = getattr(driver_error, "constraint_name", None)
    if constraint:
        return constraint == TOKEN_UNIQUE_INDEX

    message = str(error.orig)
    if TOKEN_UNIQUE_INDEX in message:
        return True
    # SQLite: "UNIQUE constraint failed: autologin_tokens.token"
    prefix = "UNIQUE constraint failed: "
    if message.startswith(prefix):
        return TOKEN_COLUMN in [column.strip() for column in message[len(prefix):].split(",")]
    return False


class AutologinTokenRepository(BaseRepository[AutologinToken]):
    """Token store backed by the autologin_tokens table."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, AutologinToken)

    @storage_errors
    async def find_by_token(self, token: str) -> Optional[AutologinToken]:
        """Get an autologin token by its exact value."""
        result = await self.db.execute(
            select(AutologinToken)
            .filter(AutologinToken.token == token)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @storage_errors
    async def token_exists(self, token: str) -> bool:
        """Check if a token value is currently stored."""
        result = await self.db.execute(
            select(AutologinToken.id).filter(AutologinToken.token == token)
        )
        return result.scalar_one_or_none() is not None

    async def create_token(self, user_id: int, token: str, path: Optional[str] = None,
                           created_at: Optional[datetime] = None) -> AutologinToken:
        """Store a new token.

        Raises:
            TokenCollisionError: another row already holds ``token``.
            StorageError: any other database failure.
        """
        obj = AutologinToken(
            user_id=user_id,
            token=token,
            path=path,
            count=0,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self.db.add(obj)
        try:
            await self.db.flush()
        except IntegrityError as e:
            if _is_token_collision(e):
                raise TokenCollisionError(token[:6]) from e
            raise StorageError(str(e.orig)) from e
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
        return await self._reload(obj)

    @storage_errors
    async def _reload(self, obj: AutologinToken) -> AutologinToken:
        await self.db.refresh(obj)
        return obj

    @storage_errors
    async def delete_expired(self, cutoff: datetime) -> int:
        """Delete every token created strictly before ``cutoff``.

        Returns:
            Number of tokens deleted.
        """
        result = await self.db.execute(
            delete(AutologinToken)
            .where(AutologinToken.created_at < cutoff)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    @storage_errors
    async def increment_count(self, record: AutologinToken) -> Optional[AutologinToken]:
        """Atomically add one to the usage counter of ``record``.

        The increment happens inside the database, so concurrent redemptions
        never lose updates. Returns the reloaded record, or None when the row
        no longer exists (removed by a sweep in the meantime).
        """
        result = await self.db.execute(
            update(AutologinToken)
            .where(AutologinToken.id == record.id)
            .values(count=AutologinToken.count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return await self.get_by_id(record.id)

    @storage_errors
    async def delete_for_user(self, user_id: int) -> int:
        """Delete all tokens issued for a user."""
        result = await self.db.execute(
            delete(AutologinToken)
            .where(AutologinToken.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    @storage_errors
    async def get_by_user_id(self, user_id: int) -> List[AutologinToken]:
        """Get all tokens issued for a user, newest first."""
        result = await self.db.execute(
            select(AutologinToken)
            .filter(AutologinToken.user_id == user_id)
            .order_by(AutologinToken.created_at.desc())
        )
        return list(result.scalars().all())
