import functools
import logging
from abc import ABC
from typing import Generic, TypeVar, Type, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

from autologin.core.exceptions import AutologinError, StorageError

ModelType = TypeVar("ModelType", bound=DeclarativeBase)

logger = logging.getLogger(__name__)


def storage_errors(method):
    """Re-raise database failures of a repository coroutine as StorageError."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except AutologinError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"{type(self).__name__}.{method.__name__} failed: {e}")
            raise StorageError(str(e)) from e

    return wrapper


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository class providing lookups shared by all models.
    """

    def __init__(self, db: AsyncSession, model: Type[ModelType]):
        self.db = db
        self.model = model

    @storage_errors
    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """Get a single record by ID, reloading it if already in the session."""
        result = await self.db.execute(
            select(self.model)
            .filter(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
