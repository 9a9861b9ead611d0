"""Buyer-facing store abuse reports"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.logging import get_logger
from app.core.rate_limit import limiter, REPORT_RATE_LIMIT
from app.models.store import Store
from app.models.store_report import StoreReport
from app.models.user import User
from app.routers.deps import require_login
from app.schemas.store import StoreReportCreate

logger = get_logger(__name__)

router = APIRouter(prefix="/api/stores", tags=["store-reports"])


@router.post("/{store_id}/report", status_code=201)
@limiter.limit(REPORT_RATE_LIMIT)
async def report_store(
    request: Request,
    store_id: int,
    req: StoreReportCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_login),
):
    """One report per user per store"""
    store = db.query(Store).filter(Store.id == store_id).first()
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")
    if store.user_id == user.id:
        raise HTTPException(status_code=400, detail="You cannot report your own store")

    existing = (
        db.query(StoreReport)
        .filter(StoreReport.store_id == store_id, StoreReport.reported_by == user.id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=422, detail="You have already reported this store")

    report = StoreReport(
        store_id=store_id,
        reported_by=user.id,
        reason=req.reason,
        description=req.description,
        status="pending",
    )
    db.add(report)
    db.commit()
    db.refresh(report)

    logger.info(f"store reported: store_id={store_id}, report_id={report.id}, reason={req.reason}")
    return {"message": "Report submitted. Our team will review it.", "report_id": report.id}
