"""Seller: subscription purchase and status"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.clock import now_local
from app.core.database import get_db
from app.models.store import Store
from app.models.subscription import Subscription
from app.routers.deps import require_seller_store
from app.routers.presenters import iso, money
from app.schemas.subscription import UpgradeRequest
from app.services import subscription_service

router = APIRouter(prefix="/api/subscription", tags=["subscription"])


def _subscription_dict(db: Session, sub: Subscription) -> dict:
    plan = subscription_service.get_plan(db, sub.subscription_plan_id)
    return {
        "id": sub.id,
        "subscription_code": sub.subscription_code,
        "status": sub.status,
        "plan_id": plan.id if plan else None,
        "plan_name": plan.name if plan else None,
        "plan_slug": plan.slug if plan else None,
        "plan_type": plan.plan_type if plan else "basic",
        "price": money(plan.price) if plan else None,
        "product_limit": plan.product_limit if plan else None,
        "payment_receipt_path": sub.payment_receipt_path,
        "starts_at": iso(sub.starts_at),
        "ends_at": iso(sub.ends_at),
        "approved_at": iso(sub.approved_at),
        "rejection_reason": sub.rejection_reason,
        "created_at": iso(sub.created_at),
    }


@router.post("/upgrade", status_code=201)
async def upgrade(
    req: UpgradeRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    """Submit proof of payment for a plan; an admin confirms it"""
    plan = subscription_service.get_plan(db, req.plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Subscription plan not found")

    sub = subscription_service.request_upgrade(db, store, plan, req.payment_receipt_path, now_local())
    return {
        "message": "Payment proof submitted successfully. Awaiting admin confirmation.",
        "subscription": _subscription_dict(db, sub),
    }


@router.get("/current")
async def current(db: Session = Depends(get_db), store: Store = Depends(require_seller_store)):
    """Latest subscription; an active one past its end date is expired on read"""
    sub = subscription_service.refresh_current_subscription(db, store.id, now_local())
    if sub is None:
        return {"data": None}
    return {"data": _subscription_dict(db, sub)}


@router.get("/history")
async def history(db: Session = Depends(get_db), store: Store = Depends(require_seller_store)):
    subs = (
        db.query(Subscription)
        .filter(Subscription.store_id == store.id)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .all()
    )
    return {"data": [_subscription_dict(db, s) for s in subs]}
