"""Admin: audit trail"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date, datetime

from app.core.database import get_db
from app.models.audit_log import AuditLog
from app.routers.deps import require_admin

router = APIRouter(prefix="/api/admin/audit-logs", tags=["admin-logs"])


@router.get("")
async def list_audit_logs(
    category: Optional[str] = None,
    search: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    """Audit rows, newest first"""
    q = db.query(AuditLog)
    if category and category != "all":
        q = q.filter(AuditLog.category == category)
    if search:
        like = f"%{search}%"
        q = q.filter(or_(AuditLog.user_name.like(like), AuditLog.details.like(like), AuditLog.action.like(like)))
    if start_date:
        q = q.filter(AuditLog.created_at >= datetime.combine(start_date, datetime.min.time()))
    if end_date:
        q = q.filter(AuditLog.created_at <= datetime.combine(end_date, datetime.max.time()))

    total = q.count()
    logs = q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).offset((page - 1) * per_page).limit(per_page).all()

    return {
        "total": total,
        "page": page,
        "per_page": per_page,
        "logs": [
            {
                "id": l.id,
                "user_id": l.user_id,
                "user_name": l.user_name,
                "user_email": l.user_email,
                "action": l.action,
                "category": l.category,
                "details": l.details,
                "ip_address": l.ip_address,
                "metadata": l.extra,
                "created_at": l.created_at.isoformat() if l.created_at else None,
            }
            for l in logs
        ],
    }
