"""Admin: catalogue across all stores and product moderation"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.clock import now_local
from app.core.database import get_db
from app.core.logging import get_logger
from app.models.category import Category
from app.models.product import Product
from app.models.store import Store
from app.models.user import User
from app.routers.deps import require_super_admin
from app.routers.presenters import paginate, product_dict
from app.services import audit_service, catalog_service, promotion_service

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin/products", tags=["admin-products"])


class ProductModeration(BaseModel):
    status: Literal["active", "suspended"]


def _admin_view(db: Session, product: Product, store: Optional[Store], category: Optional[Category]) -> dict:
    data = product_dict(product)
    data["category"] = category.name if category else "Uncategorized"
    data["store"] = store.name if store else "Unknown Store"
    data["is_featured"] = promotion_service.is_featured(db, product.id)
    return data


@router.get("")
async def list_products(
    search: Optional[str] = None,
    status: Optional[str] = None,
    store_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
    _=Depends(require_super_admin),
):
    q = (
        db.query(Product, Store, Category)
        .outerjoin(Store, Product.store_id == Store.id)
        .outerjoin(Category, Product.category_id == Category.id)
    )
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Product.name.like(like), Product.description.like(like)))
    if status:
        q = q.filter(Product.status == status)
    if store_id:
        q = q.filter(Product.store_id == store_id)
    q = q.order_by(Product.created_at.desc(), Product.id.desc())
    return paginate(q, page, per_page, lambda row: _admin_view(db, *row))


@router.get("/{product_id}")
async def get_product(product_id: int, db: Session = Depends(get_db), _=Depends(require_super_admin)):
    row = (
        db.query(Product, Store, Category)
        .outerjoin(Store, Product.store_id == Store.id)
        .outerjoin(Category, Product.category_id == Category.id)
        .filter(Product.id == product_id)
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Product not found")
    return _admin_view(db, *row)


@router.patch("/{product_id}/status")
async def moderate_product(
    product_id: int,
    data: ProductModeration,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_super_admin),
):
    """Take a product off the marketplace or put it back; suspending also ends its promotions"""
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    old_status = product.status
    product.status = data.status
    catalog_service.on_product_updated(db, product, old_status, product.category_id)
    if data.status == "suspended":
        featured, deals = promotion_service.deactivate_product_promotions(db, product.id, now_local())
        logger.info(f"product suspended: id={product.id}, featured_ended={featured}, deals_ended={deals}")
    db.commit()

    audit_service.record(
        db, admin, "product_suspended" if data.status == "suspended" else "product_reinstated", "product",
        f"Product {product.name} ({product.id}): {old_status} -> {data.status}", request=request,
    )
    return {"message": "Product status updated", "data": product_dict(product)}
