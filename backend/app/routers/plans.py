"""Public subscription plan listing"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.subscription_plan import SubscriptionPlan
from app.routers.presenters import money
from app.services.promotion_service import featured_duration_days, max_slots_for

router = APIRouter(prefix="/api/subscription-plans", tags=["plans"])


def plan_dict(plan: SubscriptionPlan) -> dict:
    return {
        "id": plan.id,
        "name": plan.name,
        "slug": plan.slug,
        "plan_type": plan.plan_type,
        "description": plan.description,
        "price": money(plan.price),
        "product_limit": plan.product_limit,
        "featured_slots": max_slots_for(plan.plan_type, "featured"),
        "hot_deal_slots": max_slots_for(plan.plan_type, "hot_deal"),
        "featured_duration_days": featured_duration_days(plan.plan_type),
        "bank_account_name": plan.bank_account_name,
        "bank_account_number": plan.bank_account_number,
        "bank_name": plan.bank_name,
        "is_active": plan.is_active,
    }


@router.get("")
async def list_plans(db: Session = Depends(get_db)):
    """Active plans, cheapest tier first"""
    plans = (
        db.query(SubscriptionPlan)
        .filter(SubscriptionPlan.is_active == True)
        .order_by(SubscriptionPlan.price.asc(), SubscriptionPlan.id.asc())
        .all()
    )
    return {"data": [plan_dict(p) for p in plans]}


@router.get("/{plan_id}")
async def get_plan(plan_id: int, db: Session = Depends(get_db)):
    plan = db.query(SubscriptionPlan).filter(SubscriptionPlan.id == plan_id).first()
    if not plan:
        raise HTTPException(status_code=404, detail="Subscription plan not found")
    return {"data": plan_dict(plan)}
