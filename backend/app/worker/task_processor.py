"""Delayed expiry processing"""
from datetime import timedelta

from app.core.clock import now_local
from app.core.database import SessionLocal
from app.core.logging import get_logger
from app.services.delayed_queue import claim_due, enqueue_expiry, parse_member
from app.services.promotion_service import expire_promotion

logger = get_logger(__name__)

RETRY_DELAY_SECONDS = 60


def process_due_expiries(r=None) -> int:
    """
    Claim every due queue member and deactivate its row.

    Returns the number of members claimed. Each member gets its own session
    so one failure does not affect the others.
    """
    members = claim_due(now_local(), r)
    for member in members:
        parsed = parse_member(member)
        if parsed is None:
            logger.warning(f"malformed queue member dropped: {member}")
            continue

        kind, row_id = parsed
        db = SessionLocal()
        try:
            expire_promotion(db, kind, row_id)
        except Exception as e:
            db.rollback()
            logger.error(f"delayed expiry failed, requeued: {member} - {e}")
            enqueue_expiry(kind, row_id, now_local() + timedelta(seconds=RETRY_DELAY_SECONDS), r)
        finally:
            db.close()

    return len(members)
