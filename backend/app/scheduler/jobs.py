"""Job table of the scheduler process"""
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.scheduler.promotion_expiry import run_promotion_expiry
from app.scheduler.subscription_expiry import run_subscription_expiry
from app.scheduler.category_reconcile import run_category_reconcile


def every(minutes: int) -> IntervalTrigger:
    return IntervalTrigger(minutes=minutes, timezone=settings.TIMEZONE)


def register_jobs(scheduler) -> None:
    scheduler.add_job(
        run_promotion_expiry,
        every(settings.PROMOTION_SWEEP_MINUTES),
        id="promotion_expiry",
        max_instances=1,
        coalesce=True,
    )

    scheduler.add_job(
        run_subscription_expiry,
        every(settings.SUBSCRIPTION_SWEEP_MINUTES),
        id="subscription_expiry",
        max_instances=1,
        coalesce=True,
    )

    scheduler.add_job(
        run_category_reconcile,
        CronTrigger(hour=settings.CATEGORY_RECONCILE_HOUR, minute=0, timezone=settings.TIMEZONE),
        id="category_reconcile",
        max_instances=1,
    )
