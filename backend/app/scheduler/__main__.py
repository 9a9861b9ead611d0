"""Scheduler entry point: python -m app.scheduler"""
import signal
import sys
from apscheduler.schedulers.blocking import BlockingScheduler

from app.core.config import settings
from app.core.logging import setup_logging, get_logger
from app.scheduler.jobs import register_jobs

setup_logging(debug=settings.DEBUG, process="scheduler")
logger = get_logger("scheduler")

scheduler = BlockingScheduler(timezone=settings.TIMEZONE)


def signal_handler(sig, frame):
    logger.info("scheduler stop signal received")
    scheduler.shutdown(wait=False)
    sys.exit(0)


signal.signal(signal.SIGTERM, signal_handler)
signal.signal(signal.SIGINT, signal_handler)


def main():
    logger.info(
        f"scheduler started: promotions every {settings.PROMOTION_SWEEP_MINUTES}min, "
        f"subscriptions every {settings.SUBSCRIPTION_SWEEP_MINUTES}min, "
        f"category reconcile at {settings.CATEGORY_RECONCILE_HOUR:02d}:00"
    )

    register_jobs(scheduler)

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("scheduler stopped")


if __name__ == "__main__":
    main()
