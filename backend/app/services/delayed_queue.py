"""
Delayed promotion expiry queue.

A Redis sorted set keyed by settings.DELAYED_QUEUE_KEY. Each member is
"<kind>:<row id>" and its score is the UNIX time it becomes due. Producers
call enqueue_expiry() after committing a promotion row; the worker calls
claim_due() and runs expire_promotion() for every member it owns.
"""
from datetime import datetime
from typing import Optional

import redis as sync_redis

from app.core.clock import to_timestamp
from app.core.config import settings
from app.core.logging import get_logger
from app.core.redis import get_sync_redis

logger = get_logger(__name__)

KINDS = ("featured", "hot_deal")


def _member(kind: str, row_id: int) -> str:
    return f"{kind}:{row_id}"


def parse_member(member: str) -> Optional[tuple[str, int]]:
    kind, _, raw_id = member.partition(":")
    if kind not in KINDS or not raw_id.isdigit():
        return None
    return kind, int(raw_id)


def enqueue_expiry(kind: str, row_id: int, run_at: datetime, r: sync_redis.Redis = None) -> None:
    """Schedule a single promotion row to be deactivated at run_at"""
    if kind not in KINDS:
        raise ValueError(f"unknown promotion kind: {kind}")
    r = r or get_sync_redis()
    r.zadd(settings.DELAYED_QUEUE_KEY, {_member(kind, row_id): to_timestamp(run_at)})
    logger.debug(f"expiry queued: {kind}:{row_id} at {run_at.isoformat()}")


def claim_due(now: datetime, r: sync_redis.Redis = None, limit: int = 100) -> list[str]:
    """
    Take ownership of members whose due time has passed.

    ZREM returning 1 means this caller removed the member, so concurrent
    workers never both run the same enqueued job.
    """
    r = r or get_sync_redis()
    due = r.zrangebyscore(settings.DELAYED_QUEUE_KEY, "-inf", to_timestamp(now), start=0, num=limit)
    claimed = []
    for member in due:
        if r.zrem(settings.DELAYED_QUEUE_KEY, member) == 1:
            claimed.append(member)
    return claimed


def pending_count(r: sync_redis.Redis = None) -> int:
    r = r or get_sync_redis()
    return r.zcard(settings.DELAYED_QUEUE_KEY)
