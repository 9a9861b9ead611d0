"""Periodic: deactivate featured products and hot deals past their expiry"""
from app.core.clock import now_local
from app.core.database import SessionLocal
from app.core.logging import get_logger, log_counts
from app.services.promotion_service import expire_featured_products, expire_hot_deals

logger = get_logger(__name__)


def run_promotion_expiry():
    now = now_local()
    db = SessionLocal()
    try:
        featured = expire_featured_products(db, now)
        deals = expire_hot_deals(db, now)
        log_counts(logger, "promotion sweep done", featured=featured, hot_deals=deals)
    except Exception as e:
        db.rollback()
        logger.error(f"promotion sweep failed: {e}")
    finally:
        db.close()
