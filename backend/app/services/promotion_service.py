"""
Featured product / hot deal lifecycle.

Slots are accounted per subscription_code: every row created under a code
counts against that subscription's ceiling whether or not it is still
active, so only a new subscription frees slots.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging import get_logger
from app.models.featured_product import FeaturedProduct
from app.models.hot_deal import HotDeal
from app.models.product import Product
from app.models.store import Store
from app.models.subscription import Subscription
from app.models.subscription_plan import SubscriptionPlan
from app.services.delayed_queue import enqueue_expiry
from app.services.errors import MarketplaceError, PromotionConflict, SlotLimitReached

logger = get_logger(__name__)

PROMOTION_MODELS = {
    "featured": FeaturedProduct,
    "hot_deal": HotDeal,
}


@dataclass
class SlotStatus:
    promotion_type: str
    plan_type: str
    subscription_code: Optional[str]
    used: int
    max_slots: int

    @property
    def remaining(self) -> int:
        return max(0, self.max_slots - self.used)


# --- subscription / plan resolution ---

def get_current_subscription(db: Session, store_id: int, lock: bool = False) -> Optional[Subscription]:
    """Most recent active subscription of the store (newest created_at, then id)"""
    query = (
        db.query(Subscription)
        .filter(Subscription.store_id == store_id, Subscription.status == "active")
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
    )
    if lock:
        query = query.with_for_update()
    return query.first()


def resolve_plan_type(db: Session, subscription: Optional[Subscription]) -> str:
    if subscription is None:
        return "basic"
    plan = db.query(SubscriptionPlan).filter(SubscriptionPlan.id == subscription.subscription_plan_id).first()
    if plan is None:
        return "basic"
    return plan.plan_type


def max_slots_for(plan_type: str, promotion_type: str) -> int:
    table = settings.FEATURED_SLOTS if promotion_type == "featured" else settings.HOT_DEAL_SLOTS
    return table.get(plan_type, 0)


def featured_duration_days(plan_type: str) -> int:
    return settings.FEATURED_DURATION_DAYS.get(plan_type, 0)


def usage_query(db: Session, promotion_type: str, store_id: int, subscription_code: str):
    model = PROMOTION_MODELS[promotion_type]
    return db.query(model.id).filter(model.store_id == store_id, model.subscription_code == subscription_code)


def count_used(db: Session, promotion_type: str, store_id: int, subscription_code: str, lock: bool = False) -> int:
    query = usage_query(db, promotion_type, store_id, subscription_code)
    if lock:
        # locking read: sees rows committed after this transaction's snapshot
        return len(query.with_for_update().all())
    return query.count()


def check_slots(db: Session, store_id: int, promotion_type: str, lock: bool = False) -> SlotStatus:
    """
    Slot usage of the store's current subscription.

    With lock=True the subscription row is held FOR UPDATE until the caller
    commits, serializing count-then-insert per subscription, and the count
    itself is a locking read so a waiter sees the rows its predecessor
    committed.
    """
    subscription = get_current_subscription(db, store_id, lock=lock)
    if subscription is None:
        return SlotStatus(promotion_type, "basic", None, 0, 0)

    plan_type = resolve_plan_type(db, subscription)
    return SlotStatus(
        promotion_type=promotion_type,
        plan_type=plan_type,
        subscription_code=subscription.subscription_code,
        used=count_used(db, promotion_type, store_id, subscription.subscription_code, lock=lock),
        max_slots=max_slots_for(plan_type, promotion_type),
    )


def _reserve_slot(db: Session, store_id: int, promotion_type: str) -> SlotStatus:
    status = check_slots(db, store_id, promotion_type, lock=True)
    if status.used >= status.max_slots:
        db.rollback()
        raise SlotLimitReached(promotion_type, status.plan_type, status.used, status.max_slots)
    return status


def _schedule_expiry(kind: str, row_id: int, run_at: Optional[datetime]) -> None:
    """Delayed deactivation; the periodic sweep covers any enqueue failure"""
    if run_at is None:
        return
    try:
        enqueue_expiry(kind, row_id, run_at)
    except Exception as e:
        logger.error(f"expiry enqueue failed: {kind}:{row_id}: {e}")


# --- predicates ---

def is_featured(db: Session, product_id: int) -> bool:
    return (
        db.query(FeaturedProduct.id)
        .filter(FeaturedProduct.product_id == product_id, FeaturedProduct.is_active == True)
        .first()
        is not None
    )


def has_active_deal(db: Session, product_id: int, now: datetime) -> bool:
    return (
        db.query(HotDeal.id)
        .filter(
            HotDeal.product_id == product_id,
            HotDeal.is_active == True,
            HotDeal.deal_start_at <= now,
            HotDeal.deal_end_at >= now,
        )
        .first()
        is not None
    )


def has_open_deal(db: Session, product_id: int, now: datetime) -> bool:
    """Active deal that has not ended yet, started or not"""
    return (
        db.query(HotDeal.id)
        .filter(HotDeal.product_id == product_id, HotDeal.is_active == True, HotDeal.deal_end_at >= now)
        .first()
        is not None
    )


def discount_percentage(original_price, deal_price) -> int:
    original = Decimal(original_price or 0)
    if original == 0:
        return 0
    return int(round((original - Decimal(deal_price)) / original * 100))


# --- featured products ---

def create_featured_product(db: Session, store: Store, product: Product, now: datetime) -> tuple[FeaturedProduct, SlotStatus]:
    """Feature a product under the store's current subscription"""
    if is_featured(db, product.id):
        raise PromotionConflict("Product is already featured.")

    status = _reserve_slot(db, store.id, "featured")
    featured = FeaturedProduct(
        product_id=product.id,
        store_id=store.id,
        subscription_code=status.subscription_code,
        plan_type=status.plan_type,
        featured_at=now,
        start_time=now,
        finish_time=now + timedelta(days=featured_duration_days(status.plan_type)),
        is_active=True,
    )
    db.add(featured)
    db.commit()
    db.refresh(featured)
    status.used += 1

    logger.info(
        f"product featured: featured_id={featured.id}, product_id={product.id}, "
        f"code={status.subscription_code}, used={status.used}/{status.max_slots}"
    )
    _schedule_expiry("featured", featured.id, featured.finish_time)
    return featured, status


def unfeature_product(db: Session, store_id: int, product_id: int, now: datetime) -> int:
    result = db.execute(
        update(FeaturedProduct)
        .where(
            FeaturedProduct.store_id == store_id,
            FeaturedProduct.product_id == product_id,
            FeaturedProduct.is_active == True,
        )
        .values(is_active=False, rotated_out_at=now)
    )
    db.commit()
    return result.rowcount


# --- hot deals ---

def create_hot_deal(
    db: Session,
    store: Store,
    product: Product,
    deal_price,
    deal_start_at: datetime,
    deal_end_at: datetime,
    description: Optional[str],
    now: datetime,
) -> tuple[HotDeal, SlotStatus]:
    """Open a hot deal on a product under the store's current subscription"""
    if deal_end_at <= deal_start_at:
        raise MarketplaceError("Deal end time must be after the start time.")
    if product.new_price is None:
        raise MarketplaceError("Set a price on the product before creating a hot deal.")
    if has_open_deal(db, product.id, now):
        raise PromotionConflict("Product already has an active hot deal.")

    status = _reserve_slot(db, store.id, "hot_deal")
    deal = HotDeal(
        product_id=product.id,
        store_id=store.id,
        subscription_code=status.subscription_code,
        plan_type=status.plan_type,
        original_price=product.new_price,
        deal_price=deal_price,
        discount_percentage=discount_percentage(product.new_price, deal_price),
        deal_start_at=deal_start_at,
        deal_end_at=deal_end_at,
        deal_description=description,
        is_active=True,
        activated_at=deal_start_at,
    )
    db.add(deal)
    db.commit()
    db.refresh(deal)
    status.used += 1

    logger.info(
        f"hot deal created: deal_id={deal.id}, product_id={product.id}, "
        f"code={status.subscription_code}, used={status.used}/{status.max_slots}"
    )
    _schedule_expiry("hot_deal", deal.id, deal.deal_end_at)
    return deal, status


def update_hot_deal(
    db: Session,
    deal: HotDeal,
    now: datetime,
    deal_price=None,
    deal_end_at: Optional[datetime] = None,
    description: Optional[str] = None,
) -> HotDeal:
    if deal_end_at is not None:
        if deal_end_at <= now:
            raise MarketplaceError("Deal end time must be in the future.")
        if deal_end_at <= deal.deal_start_at:
            raise MarketplaceError("Deal end time must be after the start time.")
        deal.deal_end_at = deal_end_at
    if deal_price is not None:
        deal.deal_price = deal_price
        deal.discount_percentage = discount_percentage(deal.original_price, deal_price)
    if description is not None:
        deal.deal_description = description

    db.commit()
    db.refresh(deal)
    if deal_end_at is not None:
        _schedule_expiry("hot_deal", deal.id, deal.deal_end_at)
    return deal


def end_hot_deal(db: Session, deal: HotDeal, now: datetime) -> HotDeal:
    """Close a deal early"""
    deal.is_active = False
    deal.deal_end_at = now
    deal.deactivated_at = now
    db.commit()
    db.refresh(deal)
    return deal


def terminate_subscription_promotions(db: Session, subscription_code: str, now: datetime) -> tuple[int, int]:
    """Deactivate every running promotion of a subscription. Caller commits."""
    featured = db.execute(
        update(FeaturedProduct)
        .where(FeaturedProduct.subscription_code == subscription_code, FeaturedProduct.is_active == True)
        .values(is_active=False, rotated_out_at=now)
    ).rowcount
    deals = db.execute(
        update(HotDeal)
        .where(HotDeal.subscription_code == subscription_code, HotDeal.is_active == True)
        .values(is_active=False, deal_end_at=now, deactivated_at=now)
    ).rowcount
    return featured, deals


def deactivate_product_promotions(db: Session, product_id: int, now: datetime) -> tuple[int, int]:
    """Switch off a product's running promotions. Caller commits."""
    featured = db.execute(
        update(FeaturedProduct)
        .where(FeaturedProduct.product_id == product_id, FeaturedProduct.is_active == True)
        .values(is_active=False, rotated_out_at=now)
    ).rowcount
    deals = db.execute(
        update(HotDeal)
        .where(HotDeal.product_id == product_id, HotDeal.is_active == True)
        .values(is_active=False, deactivated_at=now)
    ).rowcount
    return featured, deals


def release_product_promotions(db: Session, product_id: int, now: datetime) -> tuple[int, int]:
    """
    Detach a product's promotion rows before the product is deleted.

    Running rows are switched off; every row stays under its subscription
    code so it keeps holding its slot. Caller commits.
    """
    featured, deals = deactivate_product_promotions(db, product_id, now)
    db.execute(update(FeaturedProduct).where(FeaturedProduct.product_id == product_id).values(product_id=None))
    db.execute(update(HotDeal).where(HotDeal.product_id == product_id).values(product_id=None))
    return featured, deals


# --- expiry ---

def featured_expiry(row: FeaturedProduct) -> Optional[datetime]:
    if row.finish_time is not None:
        return row.finish_time
    if row.featured_at is not None:
        return row.featured_at + timedelta(days=featured_duration_days(row.plan_type))
    return None


def featured_is_expired(row: FeaturedProduct, now: datetime) -> bool:
    expiry = featured_expiry(row)
    return expiry is None or featured_duration_days(row.plan_type) == 0 or now >= expiry


def _expire_featured_rows(rows, now: datetime) -> int:
    expired = 0
    for row in rows:
        if featured_is_expired(row, now):
            row.is_active = False
            row.rotated_out_at = now
            expired += 1
    return expired


def expire_featured_products(db: Session, now: datetime) -> int:
    """
    Deactivate featured rows that are past their expiry.

    Rows with no resolvable expiry, or whose plan has no featured duration,
    are expired immediately. Commits; returns the number of rows changed.
    """
    expired = _expire_featured_rows(db.query(FeaturedProduct).filter(FeaturedProduct.is_active == True).all(), now)

    db.commit()
    if expired:
        logger.info(f"featured products expired: {expired}")
    return expired


def expire_hot_deals(db: Session, now: datetime) -> int:
    """Deactivate running deals whose end time has passed. Commits."""
    result = db.execute(
        update(HotDeal)
        .where(HotDeal.is_active == True, HotDeal.deal_end_at < now)
        .values(is_active=False, deactivated_at=now)
    )
    db.commit()
    if result.rowcount:
        logger.info(f"hot deals expired: {result.rowcount}")
    return result.rowcount


def expire_promotion(db: Session, kind: str, row_id: int, store_id: Optional[int] = None) -> bool:
    """
    Point-in-time deactivation of one row; only is_active changes.

    Missing or already inactive rows are a no-op. Returns True when the row
    was switched off by this call.
    """
    model = PROMOTION_MODELS.get(kind)
    if model is None:
        logger.warning(f"unknown promotion kind dropped: {kind}:{row_id}")
        return False

    query = db.query(model).filter(model.id == row_id)
    if store_id is not None:
        query = query.filter(model.store_id == store_id)
    row = query.first()
    if row is None or not row.is_active:
        return False

    row.is_active = False
    db.commit()
    logger.info(f"promotion expired: {kind}:{row_id}")
    return True


def expire_store_promotions(db: Session, store_id: int, now: datetime) -> None:
    """Sweep rules limited to one store, used before listing its promotions"""
    _expire_featured_rows(
        db.query(FeaturedProduct)
        .filter(FeaturedProduct.store_id == store_id, FeaturedProduct.is_active == True)
        .all(),
        now,
    )
    db.execute(
        update(HotDeal)
        .where(HotDeal.store_id == store_id, HotDeal.is_active == True, HotDeal.deal_end_at < now)
        .values(is_active=False, deactivated_at=now)
    )
    db.commit()
