"""
APScheduler integration for the autologin application.
Runs the periodic sweep of expired autologin tokens when enabled.
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.asyncio import AsyncIOExecutor

from autologin.core.config import settings
from autologin.commands.sweep_expired_tokens import sweep_expired_tokens

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


def create_scheduler() -> AsyncIOScheduler:
    """
    Create and configure the APScheduler instance.

    Returns:
        Configured AsyncIOScheduler instance
    """
    jobstores = {
        'default': MemoryJobStore()
    }

    executors = {
        'default': AsyncIOExecutor()
    }

    job_defaults = {
        'coalesce': True,  # Combine multiple pending jobs into one
        'max_instances': 1,  # Only allow one instance of each job
        'misfire_grace_time': 300  # 5 minutes grace period for missed jobs
    }

    return AsyncIOScheduler(
        jobstores=jobstores,
        executors=executors,
        job_defaults=job_defaults,
        timezone='UTC'
    )


async def setup_scheduler() -> Optional[AsyncIOScheduler]:
    """
    Set up and start the scheduler if the periodic sweep is enabled.

    Returns:
        Started scheduler instance, or None when nothing is scheduled
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already exists, shutting down existing one")
        await shutdown_scheduler()

    if not settings.AUTOLOGIN_SWEEP_SCHEDULE_ENABLED:
        logger.info("Autologin sweep schedule is disabled, not starting scheduler")
        return None

    scheduler = create_scheduler()

    logger.info(
        f"Scheduling autologin token sweep every {settings.AUTOLOGIN_SWEEP_INTERVAL_MINUTES} minutes "
        f"(lifetime: {settings.AUTOLOGIN_LIFETIME} minutes)"
    )

    scheduler.add_job(
        sweep_expired_tokens,
        trigger='interval',
        minutes=settings.AUTOLOGIN_SWEEP_INTERVAL_MINUTES,
        id='autologin_token_sweep',
        name='Autologin Token Sweep',
        replace_existing=True
    )

    scheduler.start()
    logger.info("Scheduler started successfully")

    return scheduler


async def shutdown_scheduler():
    """
    Gracefully shutdown the scheduler.
    """
    global scheduler

    if scheduler is not None:
        logger.info("Shutting down scheduler...")
        scheduler.shutdown(wait=True)
        scheduler = None
        logger.info("Scheduler shut down complete")


def get_scheduler_status() -> dict:
    """
    Get the current status of the scheduler and its jobs.

    Returns:
        Dictionary with scheduler status information
    """
    if scheduler is None:
        return {
            "running": False,
            "jobs": []
        }

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger)
        })

    return {
        "running": scheduler.running,
        "jobs": jobs
    }
