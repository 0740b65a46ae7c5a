from abc import ABC, abstractmethod
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from autologin.core.exceptions import StorageError
from autologin.repositories.user_repository import UserRepository
from autologin.repositories.autologin_token_repository import AutologinTokenRepository

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern for managing database transactions."""

    users: UserRepository
    autologin_tokens: AutologinTokenRepository

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            await self.rollback()
        else:
            await self.commit()

    @abstractmethod
    async def commit(self):
        raise NotImplementedError

    @abstractmethod
    async def rollback(self):
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """SQLAlchemy implementation of Unit of Work pattern."""

    def __init__(self, session: AsyncSession):
        self.session = session
        # Initialize repositories with the session
        self.users = UserRepository(self.session)
        self.autologin_tokens = AutologinTokenRepository(self.session)

    async def commit(self):
        """Commit the current transaction."""
        try:
            await self.session.commit()
            logger.debug("Transaction committed successfully")
        except Exception as e:
            logger.error(f"Error committing transaction: {e}")
            await self.rollback()
            if isinstance(e, SQLAlchemyError):
                raise StorageError(f"Commit failed: {e}") from e
            raise

    async def rollback(self):
        """Rollback the current transaction."""
        try:
            await self.session.rollback()
            logger.debug("Transaction rolled back")
        except Exception as e:
            logger.error(f"Error rolling back transaction: {e}")
            raise
