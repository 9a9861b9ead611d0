"""Seller: own store profile"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.clock import now_local
from app.core.database import get_db
from app.models.product import Product
from app.models.store import Store
from app.models.store_document import StoreDocument
from app.models.user import User
from app.routers.deps import require_seller_store
from app.routers.presenters import iso
from app.schemas.store import LogoRequest, StoreUpdate
from app.services import store_service, subscription_service

router = APIRouter(prefix="/api/my-store", tags=["my-store"])


def _active_subscription(db: Session, store: Store):
    sub = subscription_service.refresh_current_subscription(db, store.id, now_local())
    if sub is None or sub.status != "active":
        return None
    plan = subscription_service.get_plan(db, sub.subscription_plan_id)
    if plan is None:
        return None
    return {
        "id": sub.id,
        "subscription_code": sub.subscription_code,
        "plan_id": plan.id,
        "plan_name": plan.slug,
        "plan_display_name": plan.name,
        "product_limit": plan.product_limit,
        "status": sub.status,
        "starts_at": iso(sub.starts_at),
        "ends_at": iso(sub.ends_at),
    }


@router.get("")
async def get_my_store(db: Session = Depends(get_db), store: Store = Depends(require_seller_store)):
    """Store, owner, documents and the active plan; an ended plan is expired on read"""
    active = _active_subscription(db, store)
    db.refresh(store)
    owner = db.query(User).filter(User.id == store.user_id).first()
    documents = db.query(StoreDocument).filter(StoreDocument.store_id == store.id).order_by(StoreDocument.id).all()

    return {
        "id": store.id,
        "name": store.name,
        "owner": owner.name if owner else None,
        "owner_email": owner.email if owner else None,
        "email": store.email,
        "phone": store.phone,
        "website": store.website,
        "address": store.address,
        "city": store.city,
        "state": store.state,
        "description": store.description,
        "status": store.status,
        "subscription": store.subscription,
        "active_subscription": active,
        "rc_number": store.rc_number,
        "business_lines": store.business_lines.split(",") if store.business_lines else [],
        "products_count": db.query(Product).filter(Product.store_id == store.id).count(),
        "documents": [
            {
                "id": d.id,
                "type": d.type,
                "status": d.status,
                "is_mandatory": d.is_mandatory,
                "file_path": d.file_path,
                "created_at": iso(d.created_at),
                "rejection_reason": d.rejection_reason,
            }
            for d in documents
        ],
        "created_at": iso(store.created_at),
    }


@router.patch("")
async def update_my_store(
    req: StoreUpdate,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    store = store_service.update_store(db, store, req.model_dump(exclude_unset=True))
    return {
        "message": "Store updated successfully",
        "id": store.id,
        "name": store.name,
        "email": store.email,
        "phone": store.phone,
        "address": store.address,
        "state": store.state,
        "status": store.status,
    }


@router.post("/upload-logo")
async def upload_logo(
    req: LogoRequest,
    db: Session = Depends(get_db),
    store: Store = Depends(require_seller_store),
):
    doc = store_service.replace_logo(db, store, req.file_path, req.mime_type, req.file_size)
    return {"message": "Logo uploaded successfully", "logo_path": doc.file_path, "document_id": doc.id}
