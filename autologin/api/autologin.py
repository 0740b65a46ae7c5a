import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from autologin.core.auth import login_using_id
from autologin.core.config import settings
from autologin.core.service_dependencies import get_autologin_service
from autologin.services.autologin_service import AutologinService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["autologin"])


@router.get("/autologin/{token}", name=settings.AUTOLOGIN_ROUTE_NAME, include_in_schema=False)
async def autologin(
    request: Request,
    token: str,
    autologin_service: AutologinService = Depends(get_autologin_service)
):
    """
    Redeem an autologin link: sign the user in and redirect.

    Unknown, expired and removed tokens all produce the same 404, as do
    tokens whose user no longer exists or was deactivated. The owner is
    checked before redemption so refused links are never counted.
    """
    owner = await autologin_service.tokens.find_by_token(token)
    user = await autologin_service.uow.users.get_active_by_id(owner.user_id) if owner else None
    if owner and not user:
        logger.warning(f"Autologin token {owner.id} points at missing or inactive user {owner.user_id}")

    record = await autologin_service.validate(token) if user else None
    if not record:
        raise HTTPException(status_code=404, detail="Not found")

    login_using_id(request, user.id)
    logger.info(f"User {user.id} logged in through autologin token {record.id}")

    return RedirectResponse(url=record.path or autologin_service.config.redirect_url, status_code=302)
