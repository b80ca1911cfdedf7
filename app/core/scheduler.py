# File: app/core/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()

def start_scheduler():
    """Start all scheduled jobs"""
    from app.core.rate_limit import rate_limiter

    try:
        # Drop rate-limit windows that have already reset
        scheduler.add_job(
            rate_limiter.purge_expired,
            trigger=IntervalTrigger(minutes=settings.RATE_LIMIT_CLEANUP_MINUTES),
            id='rate_limit_cleanup',
            name='Purge expired rate-limit windows',
            replace_existing=True
        )

        scheduler.start()
        logger.info("Scheduler started successfully")
        logger.info(f"Active jobs: {len(scheduler.get_jobs())}")
    except Exception as e:
        logger.error(f"Failed to start scheduler: {e}")

def stop_scheduler():
    """Stop scheduler gracefully"""
    try:
        if scheduler.running:
            scheduler.shutdown()
        logger.info("Scheduler stopped")
    except Exception as e:
        logger.error(f"Error stopping scheduler: {e}")
