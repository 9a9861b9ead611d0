"""Daily: recompute Category.total_products from the products table"""
from app.core.database import SessionLocal
from app.core.logging import get_logger
from app.services.catalog_service import reconcile_category_counts

logger = get_logger(__name__)


def run_category_reconcile():
    db = SessionLocal()
    try:
        corrected = reconcile_category_counts(db)
        for category_id, change in corrected.items():
            logger.warning(
                f"category counter drift: id={category_id}, name={change['name']}, "
                f"{change['before']} -> {change['after']}"
            )
    except Exception as e:
        db.rollback()
        logger.error(f"category reconcile failed: {e}")
    finally:
        db.close()
