"""Marketplace clock: naive local timestamps in settings.TIMEZONE"""
from datetime import datetime
from zoneinfo import ZoneInfo

from app.core.config import settings

LOCAL_TZ = ZoneInfo(settings.TIMEZONE)


def now_local() -> datetime:
    """Current local time without tzinfo (all DateTime columns are naive)"""
    return datetime.now(LOCAL_TZ).replace(tzinfo=None)


def to_timestamp(value: datetime) -> float:
    """UNIX timestamp of a naive local datetime"""
    return value.replace(tzinfo=LOCAL_TZ).timestamp()
