"""Admin: product categories"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.category import Category
from app.models.product import Product
from app.models.user import User
from app.routers.deps import require_admin
from app.routers.presenters import iso
from app.schemas.store import CategoryCreate, CategoryUpdate
from app.services import audit_service, catalog_service

router = APIRouter(prefix="/api/admin/categories", tags=["admin-categories"])


def _category_dict(c: Category) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "slug": c.slug,
        "description": c.description,
        "is_active": c.is_active,
        "total_products": c.total_products,
        "created_at": iso(c.created_at),
    }


def _get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.get("")
async def list_categories(db: Session = Depends(get_db), _=Depends(require_admin)):
    categories = db.query(Category).order_by(Category.name.asc()).all()
    return {"data": [_category_dict(c) for c in categories]}


@router.post("", status_code=201)
async def create_category(
    req: CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if db.query(Category).filter(Category.name == req.name).first():
        raise HTTPException(status_code=400, detail="A category with this name already exists")

    category = Category(
        name=req.name,
        slug=catalog_service.slugify(req.name),
        description=req.description,
        is_active=req.is_active,
        total_products=0,
    )
    db.add(category)
    db.commit()
    db.refresh(category)

    audit_service.record(db, admin, "category_created", "settings", f"Created category {category.name}", request=request)
    return {"message": "Category created", "data": _category_dict(category)}


@router.patch("/{category_id}")
async def update_category(
    category_id: int,
    req: CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    category = _get_category(db, category_id)
    changes = req.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] != category.name:
        if db.query(Category).filter(Category.name == changes["name"], Category.id != category.id).first():
            raise HTTPException(status_code=400, detail="A category with this name already exists")
        category.slug = catalog_service.slugify(changes["name"])
    for field, value in changes.items():
        setattr(category, field, value)
    db.commit()
    db.refresh(category)

    audit_service.record(db, admin, "category_updated", "settings", f"Updated category {category.name}", request=request)
    return {"message": "Category updated", "data": _category_dict(category)}


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Only categories without products can be removed"""
    category = _get_category(db, category_id)
    in_use = db.query(Product).filter(Product.category_id == category.id).count()
    if in_use:
        raise HTTPException(status_code=400, detail=f"Category still has {in_use} product(s)")

    name = category.name
    db.delete(category)
    db.commit()
    audit_service.record(db, admin, "category_deleted", "settings", f"Deleted category {name}", request=request)
    return {"message": "Category deleted"}


@router.post("/reconcile")
async def reconcile(
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Recompute total_products from the products table"""
    corrected = catalog_service.reconcile_category_counts(db)
    audit_service.record(
        db,
        admin,
        "category_counts_reconciled",
        "settings",
        f"Reconciled category counters ({len(corrected)} corrected)",
        request=request,
    )
    return {"message": "Category counters reconciled", "corrected": corrected}
