import logging

from apscheduler.schedulers.background import BackgroundScheduler
from django.conf import settings
from django.core.management import call_command

logger = logging.getLogger(__name__)

# one scheduler per process
_scheduler = None


def start_scheduler():
    """
    Schedule the subscription digest job.

    Does nothing unless ENABLE_SCHEDULER is set. Returns the running
    scheduler, or None when disabled.
    """
    global _scheduler

    if not getattr(settings, "ENABLE_SCHEDULER", False):
        logger.info("Subscription mail scheduler disabled")
        return None

    if _scheduler is not None:
        return _scheduler

    interval = getattr(settings, "SUBSCRIPTION_MAIL_INTERVAL_MINUTES", 60)

    _scheduler = BackgroundScheduler(timezone=settings.TIME_ZONE)
    _scheduler.add_job(
        run_subscription_mail,
        trigger="interval",
        minutes=interval,
        id="send_subscription_mail",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    _scheduler.start()

    logger.info("Subscription mail scheduled every %d minutes", interval)
    return _scheduler


def run_subscription_mail():
    call_command("send_subscription_mail")
