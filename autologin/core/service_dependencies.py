from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from autologin.core.config import settings
from autologin.core.database import get_db
from autologin.repositories.unit_of_work import SqlAlchemyUnitOfWork
from autologin.services.autologin_service import AutologinService
from autologin.services.link_builder import StarletteLinkBuilder


def get_link_builder(request: Request) -> StarletteLinkBuilder:
    """Dependency to provide a link builder over the running application's routes."""
    return StarletteLinkBuilder(request.app, settings.APP_DOMAIN)


async def get_autologin_service(
    db: AsyncSession = Depends(get_db),
    link_builder: StarletteLinkBuilder = Depends(get_link_builder),
) -> AutologinService:
    """Dependency to provide AutologinService."""
    uow = SqlAlchemyUnitOfWork(db)
    return AutologinService(uow, link_builder, settings.autologin_config())
