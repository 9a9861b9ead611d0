"""Subscription lifecycle: purchase request, admin approval, expiry cascade"""
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging import get_logger
from app.models.store import Store
from app.models.subscription import Subscription
from app.models.subscription_plan import SubscriptionPlan
from app.models.user import User
from app.services import catalog_service, mail_service
from app.services.errors import InvalidTransition, MarketplaceError
from app.services.promotion_service import get_current_subscription, terminate_subscription_promotions

logger = get_logger(__name__)

PLAN_COLORS = {
    "silver": "#94a3b8",
    "gold": "#f59e0b",
    "platinum": "#a855f7",
}


def generate_subscription_code(store_id: int, now: datetime) -> str:
    """SUB-<YYYYMMDD>-<store id, 3 digits>-<6 upper hex>"""
    return f"SUB-{now:%Y%m%d}-{store_id:03d}-{secrets.token_hex(3).upper()}"


def _unique_code(db: Session, store_id: int, now: datetime) -> str:
    while True:
        code = generate_subscription_code(store_id, now)
        if not db.query(Subscription.id).filter(Subscription.subscription_code == code).first():
            return code


def get_latest_subscription(db: Session, store_id: int) -> Optional[Subscription]:
    return (
        db.query(Subscription)
        .filter(Subscription.store_id == store_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .first()
    )


def get_plan(db: Session, plan_id: int) -> Optional[SubscriptionPlan]:
    return db.query(SubscriptionPlan).filter(SubscriptionPlan.id == plan_id).first()


def request_upgrade(
    db: Session,
    store: Store,
    plan: SubscriptionPlan,
    payment_receipt_path: Optional[str],
    now: datetime,
) -> Subscription:
    """
    Submit proof of payment for a plan.

    Promotions of the store's open (pending/active) subscriptions are ended,
    those subscriptions are closed, and a new pending subscription with a
    fresh code is created. Approval is what switches the store's plan.
    """
    if not plan.is_active:
        raise MarketplaceError("This subscription plan is not available.")

    previous = (
        db.query(Subscription)
        .filter(Subscription.store_id == store.id, Subscription.status.in_(("pending", "active")))
        .all()
    )
    for sub in previous:
        featured, deals = terminate_subscription_promotions(db, sub.subscription_code, now)
        sub.status = "expired"
        logger.info(
            f"subscription superseded: id={sub.id}, code={sub.subscription_code}, "
            f"featured_ended={featured}, deals_ended={deals}"
        )

    subscription = Subscription(
        store_id=store.id,
        subscription_plan_id=plan.id,
        subscription_code=_unique_code(db, store.id, now),
        payment_receipt_path=payment_receipt_path,
        status="pending",
    )
    db.add(subscription)
    db.commit()
    db.refresh(subscription)
    logger.info(f"subscription requested: id={subscription.id}, store_id={store.id}, plan={plan.slug}")
    return subscription


def approve_subscription(db: Session, subscription: Subscription, admin: User, now: datetime) -> Subscription:
    if subscription.status != "pending":
        raise InvalidTransition(f"Only pending subscriptions can be approved (current: {subscription.status}).")

    plan = get_plan(db, subscription.subscription_plan_id)
    store = db.query(Store).filter(Store.id == subscription.store_id).first()

    subscription.status = "active"
    subscription.starts_at = now
    subscription.ends_at = now + timedelta(days=settings.SUBSCRIPTION_PERIOD_DAYS)
    subscription.approved_at = now
    subscription.activated_by = admin.id
    if store and plan:
        store.subscription = plan.slug

    db.commit()
    db.refresh(subscription)
    logger.info(f"subscription approved: id={subscription.id}, code={subscription.subscription_code}, by={admin.id}")

    owner = _store_owner(db, store)
    if owner and plan:
        mail_service.send_subscription_approved_email(
            to_email=owner.email,
            name=owner.name,
            store_name=store.name,
            plan_name=plan.name,
            subscription=subscription,
        )
    return subscription


def reject_subscription(db: Session, subscription: Subscription, reason: str) -> Subscription:
    if subscription.status != "pending":
        raise InvalidTransition(f"Only pending subscriptions can be rejected (current: {subscription.status}).")
    if not reason or not reason.strip():
        raise MarketplaceError("A rejection reason is required.")

    subscription.status = "rejected"
    subscription.rejection_reason = reason.strip()
    db.commit()
    db.refresh(subscription)
    logger.info(f"subscription rejected: id={subscription.id}")

    plan = get_plan(db, subscription.subscription_plan_id)
    store = db.query(Store).filter(Store.id == subscription.store_id).first()
    owner = _store_owner(db, store)
    if owner:
        mail_service.send_subscription_rejected_email(
            to_email=owner.email,
            name=owner.name,
            store_name=store.name,
            plan_name=plan.name if plan else "",
            reason=subscription.rejection_reason,
        )
    return subscription


def _store_owner(db: Session, store: Optional[Store]) -> Optional[User]:
    if store is None:
        return None
    return db.query(User).filter(User.id == store.user_id).first()


# --- expiry cascade ---

def _apply_expiry(db: Session, subscription: Subscription) -> int:
    """Expire one subscription and cascade to its store; caller commits"""
    subscription.status = "expired"
    store = db.query(Store).filter(Store.id == subscription.store_id).first()
    if store:
        store.subscription = "basic"
    return catalog_service.suspend_store_products(db, subscription.store_id)


def expire_subscription(db: Session, subscription: Subscription, notify: bool = True) -> int:
    """
    Expire a single subscription as one transaction.

    The subscription, its store and the store's products change together or
    not at all. Returns the number of products that were active.
    """
    try:
        suspended = _apply_expiry(db, subscription)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"subscription expired: id={subscription.id}, code={subscription.subscription_code}, "
        f"store_id={subscription.store_id}, products_suspended={suspended}"
    )
    if notify:
        _notify_expired(db, subscription)
    return suspended


def expire_subscriptions(db: Session, now: datetime) -> int:
    """Expire every active subscription whose ends_at has passed. Returns the count."""
    due_ids = [
        sub_id
        for (sub_id,) in db.query(Subscription.id)
        .filter(Subscription.status == "active", Subscription.ends_at <= now)
        .order_by(Subscription.id)
        .all()
    ]

    expired = 0
    for sub_id in due_ids:
        subscription = (
            db.query(Subscription)
            .filter(Subscription.id == sub_id, Subscription.status == "active")
            .with_for_update()
            .first()
        )
        if subscription is None:
            db.rollback()
            continue
        try:
            expire_subscription(db, subscription)
        except Exception as e:
            logger.error(f"subscription expiry failed: id={sub_id} - {e}")
            continue
        expired += 1

    if expired:
        logger.info(f"subscriptions expired: {expired}")
    return expired


def refresh_current_subscription(db: Session, store_id: int, now: datetime) -> Optional[Subscription]:
    """Latest subscription of a store, expiring it first if its period is over"""
    subscription = get_latest_subscription(db, store_id)
    if (
        subscription is not None
        and subscription.status == "active"
        and subscription.ends_at is not None
        and subscription.ends_at <= now
    ):
        expire_subscription(db, subscription)
        db.refresh(subscription)
    return subscription


def _notify_expired(db: Session, subscription: Subscription) -> None:
    store = db.query(Store).filter(Store.id == subscription.store_id).first()
    owner = _store_owner(db, store)
    if owner is None:
        return
    plan = get_plan(db, subscription.subscription_plan_id)
    mail_service.send_subscription_expired_email(
        to_email=owner.email,
        name=owner.name,
        store_name=store.name,
        plan_name=plan.name if plan else "",
        subscription=subscription,
    )


# --- reporting ---

def product_limit_for(db: Session, store_id: int) -> Optional[int]:
    """Product ceiling of the current plan; None when the store has no active subscription"""
    subscription = get_current_subscription(db, store_id)
    if subscription is None:
        return None
    plan = get_plan(db, subscription.subscription_plan_id)
    return plan.product_limit if plan else None


def stores_by_plan(db: Session) -> list[dict]:
    """Active subscription count per plan, for the super-admin chart"""
    rows = (
        db.query(SubscriptionPlan, Subscription)
        .join(Subscription, Subscription.subscription_plan_id == SubscriptionPlan.id)
        .filter(Subscription.status == "active")
        .all()
    )
    grouped: dict[str, dict] = {}
    for plan, _ in rows:
        entry = grouped.setdefault(
            plan.slug,
            {"name": plan.name, "value": 0, "color": PLAN_COLORS.get(plan.plan_type, "#888888")},
        )
        entry["value"] += 1
    return list(grouped.values())
