"""Seller: featured products and hot deals"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.clock import now_local
from app.core.database import get_db
from app.core.rate_limit import limiter, PROMOTION_RATE_LIMIT
from app.models.featured_product import FeaturedProduct
from app.models.hot_deal import HotDeal
from app.models.product import Product
from app.models.store import Store
from app.routers.deps import require_seller_store
from app.routers.presenters import featured_dict, hot_deal_dict, iso
from app.schemas.promotion import HotDealCreate, HotDealUpdate
from app.services import promotion_service

router = APIRouter(prefix="/api", tags=["seller-promotions"])


def _own_product(db: Session, store: Store, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    if product.store_id != store.id:
        raise HTTPException(status_code=403, detail="This product does not belong to your store")
    return product


def _own_deal(db: Session, store: Store, deal_id: int) -> HotDeal:
    deal = db.query(HotDeal).filter(HotDeal.id == deal_id, HotDeal.store_id == store.id).first()
    if not deal:
        raise HTTPException(status_code=404, detail="Hot deal not found")
    return deal


@router.post("/products/{product_id}/feature", status_code=201)
@limiter.limit(PROMOTION_RATE_LIMIT)
async def feature_product(
    request: Request,
    product_id: int,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    """Feature a product; 422 with remaining_slots when the plan is full"""
    product = _own_product(db, store, product_id)
    featured, slots = promotion_service.create_featured_product(db, store, product, now_local())
    return {
        "message": "Product featured successfully",
        "featured_product": featured_dict(featured),
        "remaining_slots": slots.remaining,
    }


@router.delete("/products/{product_id}/unfeature")
async def unfeature_product(
    product_id: int,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    _own_product(db, store, product_id)
    if not promotion_service.unfeature_product(db, store.id, product_id, now_local()):
        raise HTTPException(status_code=404, detail="Product is not featured")
    return {"message": "Product removed from featured"}


@router.post("/hot-deals", status_code=201)
@limiter.limit(PROMOTION_RATE_LIMIT)
async def create_hot_deal(
    request: Request,
    req: HotDealCreate,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    product = _own_product(db, store, req.product_id)
    deal, slots = promotion_service.create_hot_deal(
        db,
        store,
        product,
        deal_price=req.deal_price,
        deal_start_at=req.deal_start_at,
        deal_end_at=req.deal_end_at,
        description=req.deal_description,
        now=now_local(),
    )
    return {
        "message": "Hot deal created successfully",
        "hot_deal": hot_deal_dict(deal),
        "remaining_slots": slots.remaining,
    }


@router.patch("/hot-deals/{deal_id}")
async def update_hot_deal(
    deal_id: int,
    req: HotDealUpdate,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    deal = _own_deal(db, store, deal_id)
    deal = promotion_service.update_hot_deal(
        db,
        deal,
        now=now_local(),
        deal_price=req.deal_price,
        deal_end_at=req.deal_end_at,
        description=req.deal_description,
    )
    return {"message": "Hot deal updated", "hot_deal": hot_deal_dict(deal)}


@router.delete("/hot-deals/{deal_id}")
async def end_hot_deal(
    deal_id: int,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    """End a deal before its scheduled end"""
    deal = _own_deal(db, store, deal_id)
    promotion_service.end_hot_deal(db, deal, now_local())
    return {"message": "Hot deal ended"}


@router.get("/featured-and-deals")
async def my_featured_and_deals(
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    """Running promotions of the current subscription with slot usage"""
    featured_slots = promotion_service.check_slots(db, store.id, "featured")
    deal_slots = promotion_service.check_slots(db, store.id, "hot_deal")
    code = featured_slots.subscription_code

    featured, deals = [], []
    if code is not None:
        featured = (
            db.query(FeaturedProduct, Product)
            .join(Product, FeaturedProduct.product_id == Product.id)
            .filter(
                FeaturedProduct.store_id == store.id,
                FeaturedProduct.subscription_code == code,
                FeaturedProduct.is_active == True,
            )
            .all()
        )
        deals = (
            db.query(HotDeal, Product)
            .join(Product, HotDeal.product_id == Product.id)
            .filter(HotDeal.store_id == store.id, HotDeal.subscription_code == code, HotDeal.is_active == True)
            .all()
        )

    return {
        "featured_products": [featured_dict(f, p) for f, p in featured],
        "hot_deals": [hot_deal_dict(d, p) for d, p in deals],
        "plan_type": featured_slots.plan_type,
        "subscription_code": code,
        "featured_slots_used": featured_slots.used,
        "featured_slots_max": featured_slots.max_slots,
        "hot_deals_used": deal_slots.used,
        "hot_deals_max": deal_slots.max_slots,
    }


def _days_left(end, now):
    if end is None:
        return None
    return (end - now).days


@router.get("/promotions")
async def my_promotions(
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    """Every promotion of the current subscription with its expiry state"""
    now = now_local()
    subscription = promotion_service.get_current_subscription(db, store.id)
    if subscription is None:
        return {"featured_products": [], "hot_deals": []}

    promotion_service.expire_store_promotions(db, store.id, now)
    code = subscription.subscription_code

    featured = (
        db.query(FeaturedProduct, Product)
        .outerjoin(Product, FeaturedProduct.product_id == Product.id)
        .filter(FeaturedProduct.store_id == store.id, FeaturedProduct.subscription_code == code)
        .order_by(FeaturedProduct.id.desc())
        .all()
    )
    deals = (
        db.query(HotDeal, Product)
        .outerjoin(Product, HotDeal.product_id == Product.id)
        .filter(HotDeal.store_id == store.id, HotDeal.subscription_code == code)
        .order_by(HotDeal.id.desc())
        .all()
    )

    return {
        "subscription_code": code,
        "featured_products": [
            {
                "id": f.id,
                "product_id": f.product_id,
                "type": "featured",
                "product_name": p.name if p else "N/A",
                "plan_type": f.plan_type,
                "finish_time": iso(f.finish_time),
                "is_active": f.is_active,
                "expired": bool(f.finish_time and now > f.finish_time),
                "days_left": _days_left(f.finish_time, now),
            }
            for f, p in featured
        ],
        "hot_deals": [
            {
                "id": d.id,
                "product_id": d.product_id,
                "type": "hot_deal",
                "product_name": p.name if p else "N/A",
                "plan_type": d.plan_type,
                "deal_end_at": iso(d.deal_end_at),
                "discount": f"{d.discount_percentage}%",
                "is_active": d.is_active,
                "expired": bool(d.deal_end_at and now > d.deal_end_at),
                "days_left": _days_left(d.deal_end_at, now),
            }
            for d, p in deals
        ],
    }


@router.post("/promotions/{kind}/{promotion_id}/expire")
async def expire_promotion_now(
    kind: str,
    promotion_id: int,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    if kind not in promotion_service.PROMOTION_MODELS:
        raise HTTPException(status_code=400, detail="Invalid promotion type")

    model = promotion_service.PROMOTION_MODELS[kind]
    exists = db.query(model.id).filter(model.id == promotion_id, model.store_id == store.id).first()
    if not exists:
        raise HTTPException(status_code=404, detail="Promotion not found")

    promotion_service.expire_promotion(db, kind, promotion_id, store_id=store.id)
    label = "Featured product" if kind == "featured" else "Hot deal"
    return {"message": f"{label} expired"}
