"""
Command to remove expired autologin tokens.
Runs from the scheduler or the management CLI, independently of link issuance.
"""

import logging
from typing import Dict, Any

from autologin.core.config import settings
from autologin.core.database import AsyncSessionLocal
from autologin.core.exceptions import StorageError
from autologin.repositories.unit_of_work import SqlAlchemyUnitOfWork
from autologin.services.expiry import ExpiryPolicy

logger = logging.getLogger(__name__)


async def sweep_expired_tokens(db=None, expiry: ExpiryPolicy = None) -> Dict[str, Any]:
    """
    Delete autologin tokens older than AUTOLOGIN_LIFETIME minutes.

    Args:
        db: Optional database session. If not provided, creates a new one.
        expiry: Optional expiry policy, defaults to the configured lifetime.

    Returns:
        Dictionary with sweep statistics
    """
    expiry = expiry or ExpiryPolicy(settings.AUTOLOGIN_LIFETIME)
    cutoff_date = expiry.cutoff()

    logger.info(f"Starting autologin token sweep (lifetime: {expiry.lifetime})")

    async def _sweep(session):
        uow = SqlAlchemyUnitOfWork(session)
        try:
            total_deleted = await uow.autologin_tokens.delete_expired(cutoff_date)
            await uow.commit()
        except StorageError as e:
            logger.error(f"Error during autologin token sweep: {e}")
            await uow.rollback()
            return {
                "success": False,
                "total_deleted": 0,
                "cutoff_date": cutoff_date.isoformat(),
                "errors": [str(e)]
            }

        logger.info(f"Sweep completed: deleted {total_deleted} expired autologin tokens")
        return {
            "success": True,
            "total_deleted": total_deleted,
            "cutoff_date": cutoff_date.isoformat(),
            "errors": []
        }

    # If session is provided, use it; otherwise create a new one
    if db is not None:
        return await _sweep(db)
    else:
        async with AsyncSessionLocal() as session:
            return await _sweep(session)
