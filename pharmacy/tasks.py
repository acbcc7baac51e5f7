import logging

from celery import shared_task

from pharmacy.notifications import NotificationService

logger = logging.getLogger(__name__)


@shared_task
def run_daily_notifications():
    """Scheduled by CELERY_BEAT_SCHEDULE at 01:00 Africa/Addis_Ababa."""
    results = NotificationService().run_daily()
    logger.info(f"Daily notification run finished: {results}")
    return results
