"""Worker entry point: python -m app.worker"""
import time
import signal
from app.core.config import settings
from app.core.logging import setup_logging, get_logger
from app.services.delayed_queue import pending_count
from app.worker.task_processor import process_due_expiries

setup_logging(debug=settings.DEBUG, process="worker")
logger = get_logger("worker")

running = True


def signal_handler(sig, frame):
    global running
    logger.info("worker stop signal received")
    running = False


signal.signal(signal.SIGTERM, signal_handler)
signal.signal(signal.SIGINT, signal_handler)


def main():
    try:
        logger.info(f"worker started: {pending_count()} expiries queued")
    except Exception as e:
        logger.warning(f"worker started, queue unavailable: {e}")

    while running:
        try:
            if not process_due_expiries():
                time.sleep(settings.WORKER_POLL_SECONDS)
        except Exception as e:
            logger.error(f"worker loop error: {e}")
            time.sleep(settings.WORKER_POLL_SECONDS * 2)

    logger.info("worker stopped")


if __name__ == "__main__":
    main()
