"""Admin: subscription plan settings"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.subscription_plan import SubscriptionPlan
from app.models.user import User
from app.routers.deps import require_admin
from app.routers.plans import plan_dict
from app.schemas.subscription import PlanUpdate
from app.services import audit_service

router = APIRouter(prefix="/api/admin/subscription-plans", tags=["admin-plans"])


@router.get("")
async def list_plans(db: Session = Depends(get_db), _=Depends(require_admin)):
    """All plans including inactive ones"""
    plans = db.query(SubscriptionPlan).order_by(SubscriptionPlan.price.asc(), SubscriptionPlan.id.asc()).all()
    return {"data": [plan_dict(p) for p in plans]}


@router.patch("/{plan_id}")
async def update_plan(
    plan_id: int,
    req: PlanUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    plan = db.query(SubscriptionPlan).filter(SubscriptionPlan.id == plan_id).first()
    if not plan:
        raise HTTPException(status_code=404, detail="Subscription plan not found")

    changes = req.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(plan, field, value)
    db.commit()
    db.refresh(plan)

    audit_service.record(
        db,
        admin,
        action="plan_updated",
        category="settings",
        details=f"Updated subscription plan {plan.name}",
        request=request,
        extra={"plan_id": plan.id, "fields": sorted(changes)},
    )
    return {"message": "Subscription plan updated", "data": plan_dict(plan)}
