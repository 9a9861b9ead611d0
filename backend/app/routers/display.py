"""Public storefront: promotions, product and store browsing"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.clock import now_local
from app.core.database import get_db
from app.models.category import Category
from app.models.featured_product import FeaturedProduct
from app.models.hot_deal import HotDeal
from app.models.product import Product
from app.models.store import Store
from app.routers.presenters import (
    featured_dict,
    hot_deal_dict,
    paginate,
    plan_order,
    product_dict,
    store_logo,
    store_summary,
)

router = APIRouter(prefix="/api", tags=["display"])


def _hot_deals_query(db: Session):
    now = now_local()
    return (
        db.query(HotDeal, Product, Store)
        .join(Product, HotDeal.product_id == Product.id)
        .join(Store, HotDeal.store_id == Store.id)
        .filter(
            HotDeal.is_active == True,
            HotDeal.deal_start_at <= now,
            HotDeal.deal_end_at >= now,
        )
        .order_by(plan_order(HotDeal.plan_type), HotDeal.deal_start_at.desc())
    )


def _featured_query(db: Session):
    return (
        db.query(FeaturedProduct, Product, Store)
        .join(Product, FeaturedProduct.product_id == Product.id)
        .join(Store, FeaturedProduct.store_id == Store.id)
        .filter(FeaturedProduct.is_active == True)
        .order_by(plan_order(FeaturedProduct.plan_type), FeaturedProduct.featured_at.desc())
    )


@router.get("/hot-deals")
async def hot_deals(
    limit: int = Query(6, ge=1, le=100),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
):
    """Running deals, highest plan first"""
    return paginate(_hot_deals_query(db), page, limit, lambda row: hot_deal_dict(*row))


@router.get("/featured-products")
async def featured_products(
    limit: int = Query(8, ge=1, le=100),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
):
    return paginate(_featured_query(db), page, limit, lambda row: featured_dict(*row))


@router.get("/showcase")
async def showcase(
    hot_deals_limit: int = Query(6, ge=1, le=100),
    featured_limit: int = Query(8, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Homepage block: hot deals and featured products together"""
    deals = [hot_deal_dict(*row) for row in _hot_deals_query(db).limit(hot_deals_limit).all()]
    featured = [featured_dict(*row) for row in _featured_query(db).limit(featured_limit).all()]
    return {
        "hot_deals": deals,
        "featured_products": featured,
        "total_hot_deals": len(deals),
        "total_featured": len(featured),
    }


@router.get("/products")
async def list_products(
    limit: int = Query(12, ge=1, le=100),
    page: int = Query(1, ge=1),
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Active products, newest first. category is a category name"""
    query = (
        db.query(Product, Store, Category)
        .join(Store, Product.store_id == Store.id)
        .outerjoin(Category, Product.category_id == Category.id)
        .filter(Product.status == "active")
    )
    if category:
        query = query.filter(Category.name == category)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Product.name.like(like), Product.description.like(like)))

    query = query.order_by(Product.created_at.desc(), Product.id.desc())
    return paginate(
        query,
        page,
        limit,
        lambda row: product_dict(row[0], store=row[1], category=row[2]),
    )


@router.get("/products/{product_id}")
async def get_product(product_id: int, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.id == product_id, Product.status == "active").first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    store = db.query(Store).filter(Store.id == product.store_id).first()
    category = db.query(Category).filter(Category.id == product.category_id).first()
    return {"data": product_dict(product, store=store, category=category)}


@router.get("/stores")
async def list_stores(
    limit: int = Query(12, ge=1, le=100),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
):
    """Verified stores"""
    query = db.query(Store).filter(Store.status == "approved").order_by(Store.created_at.desc(), Store.id.desc())

    def serialize(store: Store) -> dict:
        data = store_summary(store)
        data["description"] = store.description
        data["company_logo"] = store_logo(db, store.id)
        data["products_count"] = (
            db.query(Product).filter(Product.store_id == store.id, Product.status == "active").count()
        )
        return data

    return paginate(query, page, limit, serialize)


@router.get("/stores/{store_id}/products")
async def store_products(
    store_id: int,
    limit: int = Query(12, ge=1, le=100),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
):
    store = db.query(Store).filter(Store.id == store_id, Store.status == "approved").first()
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")

    query = (
        db.query(Product, Category)
        .outerjoin(Category, Product.category_id == Category.id)
        .filter(Product.store_id == store_id, Product.status == "active")
        .order_by(Product.created_at.desc(), Product.id.desc())
    )
    result = paginate(query, page, limit, lambda row: product_dict(row[0], category=row[1]))
    result["store"] = store_summary(store)
    result["store"]["company_logo"] = store_logo(db, store.id)
    return result


@router.get("/category-counts")
async def category_counts(db: Session = Depends(get_db)):
    """{category name: active product count}"""
    rows = db.query(Category.name, Category.total_products).filter(Category.is_active == True).all()
    return {name: total for name, total in rows}
