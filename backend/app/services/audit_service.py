"""Admin action audit trail"""
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from app.core.rate_limit import get_client_ip
from app.models.audit_log import AuditLog
from app.models.user import User
from app.core.logging import get_logger

logger = get_logger(__name__)


def record(
    db: Session,
    actor: User,
    action: str,
    category: str,
    details: str,
    request: Optional[Request] = None,
    extra: Optional[dict] = None,
) -> AuditLog:
    """Append an audit row and commit"""
    entry = AuditLog(
        user_id=actor.id,
        user_name=actor.name,
        user_email=actor.email,
        action=action,
        category=category,
        details=details,
        ip_address=get_client_ip(request) if request is not None else None,
        extra=extra,
    )
    db.add(entry)
    db.commit()
    logger.info(f"audit: {action} by user_id={actor.id}: {details}")
    return entry
