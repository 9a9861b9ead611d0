"""Admin: subscription payment review"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.clock import now_local
from app.core.database import get_db
from app.models.store import Store
from app.models.subscription import Subscription
from app.models.subscription_plan import SubscriptionPlan
from app.models.user import User
from app.routers.deps import require_admin, require_super_admin
from app.routers.presenters import iso, money
from app.schemas.subscription import RejectRequest
from app.services import audit_service, subscription_service

router = APIRouter(prefix="/api/admin/subscriptions", tags=["admin-subscriptions"])


def _row_dict(sub: Subscription, store: Store, owner: Optional[User], plan: SubscriptionPlan) -> dict:
    return {
        "id": sub.id,
        "subscription_code": sub.subscription_code,
        "store_id": store.id,
        "store_name": store.name,
        "owner_name": owner.name if owner else "(deleted)",
        "plan_id": plan.id,
        "plan_name": plan.slug,
        "plan_display": plan.name,
        "price": money(plan.price),
        "product_limit": plan.product_limit,
        "status": sub.status,
        "starts_at": iso(sub.starts_at),
        "ends_at": iso(sub.ends_at),
        "payment_receipt_path": sub.payment_receipt_path,
        "created_at": iso(sub.created_at),
    }


def _get_subscription(db: Session, subscription_id: int) -> Subscription:
    sub = db.query(Subscription).filter(Subscription.id == subscription_id).first()
    if not sub:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return sub


@router.get("")
async def list_subscriptions(
    status: Optional[str] = None,
    plan: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    """Subscriptions, newest first. plan is a plan slug"""
    q = (
        db.query(Subscription, Store, User, SubscriptionPlan)
        .join(Store, Subscription.store_id == Store.id)
        .outerjoin(User, Store.user_id == User.id)
        .join(SubscriptionPlan, Subscription.subscription_plan_id == SubscriptionPlan.id)
    )
    if status and status != "all":
        q = q.filter(Subscription.status == status)
    if plan and plan != "all":
        q = q.filter(SubscriptionPlan.slug == plan)
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Store.name.like(like), User.name.like(like), Subscription.subscription_code.like(like)))

    rows = q.order_by(Subscription.created_at.desc(), Subscription.id.desc()).all()
    return {"data": [_row_dict(*row) for row in rows]}


@router.get("/analytics/by-plan")
async def stores_by_plan(db: Session = Depends(get_db), _=Depends(require_super_admin)):
    """Active subscriptions per plan for the dashboard chart"""
    return {"data": subscription_service.stores_by_plan(db)}


@router.get("/{subscription_id}")
async def get_subscription(subscription_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    sub = _get_subscription(db, subscription_id)
    store = db.query(Store).filter(Store.id == sub.store_id).first()
    owner = db.query(User).filter(User.id == store.user_id).first() if store else None
    plan = subscription_service.get_plan(db, sub.subscription_plan_id)
    approver = db.query(User).filter(User.id == sub.activated_by).first() if sub.activated_by else None

    data = _row_dict(sub, store, owner, plan)
    data.update({
        "approved_at": iso(sub.approved_at),
        "activated_by": approver.name if approver else None,
        "rejection_reason": sub.rejection_reason,
        "owner_email": owner.email if owner else None,
        "store_email": store.email,
        "store_phone": store.phone,
    })
    return data


@router.patch("/{subscription_id}/approve")
async def approve(
    subscription_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Confirm payment: pending -> active for SUBSCRIPTION_PERIOD_DAYS"""
    sub = _get_subscription(db, subscription_id)
    sub = subscription_service.approve_subscription(db, sub, admin, now_local())

    audit_service.record(
        db,
        admin,
        action="subscription_approved",
        category="subscription",
        details=f"Approved subscription {sub.subscription_code}",
        request=request,
        extra={"subscription_id": sub.id, "store_id": sub.store_id},
    )
    return {
        "message": "Subscription approved successfully",
        "subscription": {
            "id": sub.id,
            "status": sub.status,
            "starts_at": iso(sub.starts_at),
            "ends_at": iso(sub.ends_at),
        },
    }


@router.patch("/{subscription_id}/reject")
async def reject(
    subscription_id: int,
    req: RejectRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    sub = _get_subscription(db, subscription_id)
    sub = subscription_service.reject_subscription(db, sub, req.reason)

    audit_service.record(
        db,
        admin,
        action="subscription_rejected",
        category="subscription",
        details=f"Rejected subscription {sub.subscription_code}: {sub.rejection_reason}",
        request=request,
        extra={"subscription_id": sub.id, "store_id": sub.store_id},
    )
    return {
        "message": "Subscription rejected",
        "subscription": {"id": sub.id, "status": sub.status, "rejection_reason": sub.rejection_reason},
    }
