"""Seller: product catalogue"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.clock import now_local
from app.core.database import get_db
from app.core.logging import get_logger
from app.models.category import Category
from app.models.product import Product
from app.models.store import Store
from app.routers.deps import require_seller_store
from app.routers.presenters import product_dict
from app.schemas.product import ProductCreate, ProductUpdate
from app.services import catalog_service, promotion_service, subscription_service

logger = get_logger(__name__)

router = APIRouter(prefix="/api/my-products", tags=["seller-products"])


def _resolve_category(db: Session, name: str) -> Category:
    category = db.query(Category).filter(Category.name == name).first()
    if category is None:
        raise HTTPException(status_code=422, detail=f"Unknown category: {name}")
    return category


def _own_product(db: Session, store: Store, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    if product.store_id != store.id:
        raise HTTPException(status_code=403, detail="This product does not belong to your store")
    return product


def _seller_view(db: Session, product: Product) -> dict:
    category = db.query(Category).filter(Category.id == product.category_id).first()
    data = product_dict(product, category=category)
    data["is_featured"] = promotion_service.is_featured(db, product.id)
    data["has_active_deal"] = promotion_service.has_active_deal(db, product.id, now_local())
    return data


@router.get("")
async def list_my_products(db: Session = Depends(get_db), store: Store = Depends(require_seller_store)):
    products = (
        db.query(Product)
        .filter(Product.store_id == store.id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )
    return {"data": [_seller_view(db, p) for p in products]}


@router.post("", status_code=201)
async def create_product(
    req: ProductCreate,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    """Add a product; the current plan's product_limit applies"""
    limit = subscription_service.product_limit_for(db, store.id)
    if limit is not None:
        current = db.query(Product).filter(Product.store_id == store.id).count()
        if current >= limit:
            return JSONResponse(
                status_code=403,
                content={
                    "detail": "Product limit reached for your subscription plan",
                    "product_limit": limit,
                    "current_count": current,
                },
            )

    category = _resolve_category(db, req.category)
    product = Product(
        store_id=store.id,
        category_id=category.id,
        name=req.name,
        slug=catalog_service.slugify(req.name),
        description=req.description,
        old_price=req.old_price,
        new_price=req.new_price,
        specifications=req.specifications,
        status=req.status,
    )
    db.add(product)
    db.flush()
    catalog_service.on_product_created(db, product)
    db.commit()
    db.refresh(product)

    logger.info(f"product created: id={product.id}, store_id={store.id}")
    return {"message": "Product created successfully", "data": _seller_view(db, product)}


@router.get("/{product_id}")
async def get_my_product(
    product_id: int,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    return {"data": _seller_view(db, _own_product(db, store, product_id))}


@router.patch("/{product_id}")
async def update_product(
    product_id: int,
    req: ProductUpdate,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    product = _own_product(db, store, product_id)
    old_status, old_category_id = product.status, product.category_id

    changes = req.model_dump(exclude_unset=True)
    if "category" in changes:
        product.category_id = _resolve_category(db, changes.pop("category")).id
    if "name" in changes:
        product.slug = catalog_service.slugify(changes["name"])
    for field, value in changes.items():
        setattr(product, field, value)

    catalog_service.on_product_updated(db, product, old_status, old_category_id)
    db.commit()
    db.refresh(product)
    return {"message": "Product updated successfully", "data": _seller_view(db, product)}


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    """Delete a product; its promotion rows stay behind and keep their slots"""
    product = _own_product(db, store, product_id)
    promotion_service.release_product_promotions(db, product.id, now_local())
    catalog_service.on_product_deleted(db, product)
    db.delete(product)
    db.commit()
    logger.info(f"product deleted: id={product_id}, store_id={store.id}")
    return {"message": "Product deleted successfully"}
