from typing import Optional
import logging
from fastapi import Request, HTTPException, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from autologin.core.database import get_db
from autologin.models.user import User

# Configure logging for auth module
logger = logging.getLogger(__name__)


def login_using_id(request: Request, user_id: int) -> None:
    """Start a session for the user, replacing any previous one."""
    request.session.clear()
    request.session["user_id"] = user_id


def get_current_user_id(request: Request) -> Optional[int]:
    """Get current user ID from session."""
    return request.session.get("user_id")


async def require_admin(request: Request, db: AsyncSession = Depends(get_db)) -> int:
    """Dependency to require admin authentication and return user ID."""
    user_id = get_current_user_id(request)
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")

    result = await db.execute(select(User.is_admin).where(User.id == user_id))
    is_admin = result.scalar_one_or_none()

    if not is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")

    return user_id
