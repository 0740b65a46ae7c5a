import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException

from autologin.core.auth import require_admin
from autologin.core.scheduler import get_scheduler_status
from autologin.core.service_dependencies import get_autologin_service
from autologin.schemas.autologin import (
    AutologinLinkCreate,
    AutologinLinkResponse,
    AutologinTokenResponse,
    SweepResponse,
)
from autologin.services.autologin_service import AutologinService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/backoffice", tags=["backoffice"])


@router.post("/autologin-links", response_model=AutologinLinkResponse)
async def create_autologin_link(
    link: AutologinLinkCreate,
    autologin_service: AutologinService = Depends(get_autologin_service),
    admin_user_id: int = Depends(require_admin)
):
    """Issue an autologin link for a user."""
    user = await autologin_service.uow.users.get_by_id(link.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    url = await autologin_service.issue(user, link.path)
    logger.info(f"Admin {admin_user_id} issued an autologin link for user {user.id}")

    return AutologinLinkResponse(url=url)


@router.delete("/users/{user_id}/autologin-tokens", response_model=SweepResponse)
async def revoke_autologin_tokens(
    user_id: int,
    autologin_service: AutologinService = Depends(get_autologin_service),
    admin_user_id: int = Depends(require_admin)
):
    """Invalidate every outstanding autologin link of a user."""
    deleted = await autologin_service.uow.autologin_tokens.delete_for_user(user_id)
    await autologin_service.uow.commit()

    logger.info(f"Admin {admin_user_id} revoked {deleted} autologin tokens of user {user_id}")
    return SweepResponse(deleted=deleted)


@router.post("/autologin-tokens/sweep", response_model=SweepResponse)
async def sweep_autologin_tokens(
    autologin_service: AutologinService = Depends(get_autologin_service),
    admin_user_id: int = Depends(require_admin)
):
    """Remove expired autologin tokens now."""
    deleted = await autologin_service.sweep()
    return SweepResponse(deleted=deleted)


@router.get("/users/{user_id}/autologin-tokens", response_model=List[AutologinTokenResponse])
async def list_autologin_tokens(
    user_id: int,
    autologin_service: AutologinService = Depends(get_autologin_service),
    admin_user_id: int = Depends(require_admin)
):
    """List outstanding autologin tokens of a user, without their values."""
    tokens = await autologin_service.uow.autologin_tokens.get_by_user_id(user_id)
    return [AutologinTokenResponse.model_validate(token) for token in tokens]


@router.get("/scheduler")
async def scheduler_status(admin_user_id: int = Depends(require_admin)):
    """Status of the periodic token sweep."""
    return get_scheduler_status()
