"""Response shaping shared by the public, seller and admin routers"""
import math
from typing import Optional

from sqlalchemy import case
from sqlalchemy.orm import Query, Session

from app.models.category import Category
from app.models.featured_product import FeaturedProduct
from app.models.hot_deal import HotDeal
from app.models.product import Product
from app.models.store import Store
from app.models.store_document import StoreDocument

PLAN_RANK = {"platinum": 0, "gold": 1, "silver": 2, "basic": 3}


def plan_order(column):
    """Sort key: platinum, gold, silver, basic, then anything else"""
    return case(PLAN_RANK, value=column, else_=len(PLAN_RANK))


def iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def money(value) -> Optional[float]:
    return float(value) if value is not None else None


def paginate(query: Query, page: int, limit: int, serialize) -> dict:
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "data": [serialize(item) for item in items],
        "current_page": page,
        "per_page": limit,
        "total": total,
        "last_page": max(1, math.ceil(total / limit)),
    }


def store_logo(db: Session, store_id: int) -> Optional[str]:
    doc = (
        db.query(StoreDocument)
        .filter(StoreDocument.store_id == store_id, StoreDocument.type == "company_logo")
        .first()
    )
    return doc.file_path if doc else None


def store_summary(store: Optional[Store]) -> Optional[dict]:
    if store is None:
        return None
    return {
        "id": store.id,
        "name": store.name,
        "state": store.state,
        "city": store.city,
        "phone": store.phone,
        "email": store.email,
        "subscription": store.subscription,
    }


def product_dict(product: Product, store: Optional[Store] = None, category: Optional[Category] = None) -> dict:
    data = {
        "id": product.id,
        "store_id": product.store_id,
        "category_id": product.category_id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "old_price": money(product.old_price),
        "new_price": money(product.new_price),
        "specifications": product.specifications or {},
        "status": product.status,
        "created_at": iso(product.created_at),
        "updated_at": iso(product.updated_at),
    }
    if category is not None:
        data["category"] = category.name
    if store is not None:
        data["store"] = store_summary(store)
    return data


def featured_dict(row: FeaturedProduct, product: Optional[Product] = None, store: Optional[Store] = None) -> dict:
    data = {
        "id": row.id,
        "product_id": row.product_id,
        "store_id": row.store_id,
        "subscription_code": row.subscription_code,
        "plan_type": row.plan_type,
        "featured_at": iso(row.featured_at),
        "start_time": iso(row.start_time),
        "finish_time": iso(row.finish_time),
        "rotated_out_at": iso(row.rotated_out_at),
        "is_active": row.is_active,
    }
    if product is not None:
        data["product"] = product_dict(product, store=store)
    return data


def hot_deal_dict(row: HotDeal, product: Optional[Product] = None, store: Optional[Store] = None) -> dict:
    data = {
        "id": row.id,
        "product_id": row.product_id,
        "store_id": row.store_id,
        "subscription_code": row.subscription_code,
        "plan_type": row.plan_type,
        "original_price": money(row.original_price),
        "deal_price": money(row.deal_price),
        "discount_percentage": row.discount_percentage,
        "deal_start_at": iso(row.deal_start_at),
        "deal_end_at": iso(row.deal_end_at),
        "deal_description": row.deal_description,
        "is_active": row.is_active,
        "activated_at": iso(row.activated_at),
        "deactivated_at": iso(row.deactivated_at),
    }
    if product is not None:
        data["product"] = product_dict(product, store=store)
    return data
