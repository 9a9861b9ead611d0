"""Admin: store abuse reports"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.store import Store
from app.models.store_report import StoreReport
from app.models.user import User
from app.routers.deps import require_admin
from app.routers.presenters import iso
from app.schemas.store import ReportStatusUpdate
from app.services import audit_service

router = APIRouter(prefix="/api/admin/reports", tags=["admin-reports"])


def _report_dict(report: StoreReport, store: Optional[Store], reporter: Optional[User]) -> dict:
    return {
        "id": report.id,
        "store_id": report.store_id,
        "store_name": store.name if store else None,
        "reported_by": report.reported_by,
        "reporter_name": reporter.name if reporter else None,
        "reporter_email": reporter.email if reporter else None,
        "reason": report.reason,
        "description": report.description,
        "status": report.status,
        "admin_notes": report.admin_notes,
        "created_at": iso(report.created_at),
        "updated_at": iso(report.updated_at),
    }


def _report_query(db: Session):
    return (
        db.query(StoreReport, Store, User)
        .outerjoin(Store, StoreReport.store_id == Store.id)
        .outerjoin(User, StoreReport.reported_by == User.id)
    )


@router.get("")
async def list_reports(
    status: Optional[str] = None,
    reason: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    q = _report_query(db)
    if status and status != "all":
        q = q.filter(StoreReport.status == status)
    if reason and reason != "all":
        q = q.filter(StoreReport.reason == reason)

    total = q.count()
    rows = q.order_by(StoreReport.created_at.desc(), StoreReport.id.desc()).offset((page - 1) * per_page).limit(per_page).all()
    return {
        "total": total,
        "page": page,
        "per_page": per_page,
        "data": [_report_dict(*row) for row in rows],
    }


@router.get("/{report_id}")
async def get_report(report_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    row = _report_query(db).filter(StoreReport.id == report_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Report not found")
    return _report_dict(*row)


@router.patch("/{report_id}")
async def update_report_status(
    report_id: int,
    req: ReportStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    report = db.query(StoreReport).filter(StoreReport.id == report_id).first()
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")

    report.status = req.status
    if req.admin_notes is not None:
        report.admin_notes = req.admin_notes
    db.commit()

    audit_service.record(
        db,
        admin,
        "report_status_updated",
        "store",
        f"Report #{report.id} marked {req.status}",
        request=request,
        extra={"store_id": report.store_id},
    )
    return {"message": "Report updated", "status": report.status}
