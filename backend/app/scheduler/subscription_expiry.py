"""Periodic: expire ended subscriptions and suspend their stores' catalogues"""
from app.core.clock import now_local
from app.core.database import SessionLocal
from app.core.logging import get_logger, log_counts
from app.services.subscription_service import expire_subscriptions

logger = get_logger(__name__)


def run_subscription_expiry():
    db = SessionLocal()
    try:
        count = expire_subscriptions(db, now_local())
        log_counts(logger, "subscription sweep done", expired=count)
    except Exception as e:
        db.rollback()
        logger.error(f"subscription sweep failed: {e}")
    finally:
        db.close()
