"""Admin: store verification, suspension and documents"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.clock import now_local
from app.core.database import get_db
from app.core.logging import get_logger
from app.models.product import Product
from app.models.store import Store
from app.models.store_document import StoreDocument
from app.models.user import User
from app.routers.deps import require_admin, require_super_admin
from app.routers.presenters import iso
from app.schemas.store import ReasonRequest
from app.services import audit_service, catalog_service, mail_service, subscription_service

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin-stores"])


def _get_store(db: Session, store_id: int) -> Store:
    store = db.query(Store).filter(Store.id == store_id).first()
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")
    return store


def _owner(db: Session, store: Store) -> Optional[User]:
    return db.query(User).filter(User.id == store.user_id).first()


def _document_dict(doc: StoreDocument) -> dict:
    return {
        "id": doc.id,
        "store_id": doc.store_id,
        "type": doc.type,
        "file_path": doc.file_path,
        "mime_type": doc.mime_type,
        "file_size": doc.file_size,
        "status": doc.status,
        "is_mandatory": doc.is_mandatory,
        "rejection_reason": doc.rejection_reason,
        "created_at": iso(doc.created_at),
    }


@router.get("/stores")
async def list_stores(
    search: Optional[str] = None,
    status: Optional[str] = None,
    state: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    q = db.query(Store, User).outerjoin(User, Store.user_id == User.id)
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Store.name.like(like), User.email.like(like), User.name.like(like)))
    if status and status != "all":
        q = q.filter(Store.status == status)
    if state and state != "all":
        q = q.filter(Store.state.like(f"%{state}%"))

    total = q.count()
    rows = q.order_by(Store.created_at.asc(), Store.id.asc()).offset((page - 1) * per_page).limit(per_page).all()

    data = []
    for store, owner in rows:
        latest = subscription_service.get_latest_subscription(db, store.id)
        plan = subscription_service.get_plan(db, latest.subscription_plan_id) if latest else None
        data.append({
            "id": store.id,
            "name": store.name,
            "owner": owner.name if owner else "(deleted)",
            "email": store.email,
            "state": store.state,
            "status": store.status,
            "products": db.query(Product).filter(Product.store_id == store.id).count(),
            "subscription": plan.name if plan else "Basic",
            "created_at": iso(store.created_at),
            "phone": store.phone,
            "address": store.address,
            "rc_number": store.rc_number,
        })

    return {
        "data": data,
        "pagination": {
            "total": total,
            "per_page": per_page,
            "current_page": page,
            "last_page": max(1, -(-total // per_page)),
        },
    }


@router.get("/stores/{store_id}")
async def get_store(store_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    store = _get_store(db, store_id)
    owner = _owner(db, store)
    documents = db.query(StoreDocument).filter(StoreDocument.store_id == store.id).order_by(StoreDocument.id).all()
    return {
        "id": store.id,
        "name": store.name,
        "rc_number": store.rc_number,
        "description": store.description,
        "business_lines": store.business_lines,
        "state": store.state,
        "city": store.city,
        "address": store.address,
        "phone": store.phone,
        "email": store.email,
        "contact_person": store.contact_person,
        "website": store.website,
        "status": store.status,
        "subscription": store.subscription,
        "approved_at": iso(store.approved_at),
        "rejection_reason": store.rejection_reason,
        "suspension_reason": store.suspension_reason,
        "owner": {"id": owner.id, "name": owner.name, "email": owner.email} if owner else None,
        "documents": [_document_dict(d) for d in documents],
        "created_at": iso(store.created_at),
    }


@router.patch("/stores/{store_id}/approve")
async def approve_store(
    store_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_super_admin),
):
    """Verify a store; every document must already be approved"""
    store = _get_store(db, store_id)
    pending = (
        db.query(StoreDocument)
        .filter(StoreDocument.store_id == store.id, StoreDocument.status != "approved")
        .count()
    )
    if pending:
        raise HTTPException(
            status_code=422,
            detail=f"All documents must be approved before approving the store ({pending} outstanding)",
        )

    store.status = "approved"
    store.approved_at = now_local()
    store.rejection_reason = None
    db.commit()

    audit_service.record(db, admin, "store_approved", "store", f"Approved store {store.name}", request=request)
    owner = _owner(db, store)
    if owner:
        mail_service.send_store_approved_email(owner.email, owner.name, store.name)
    return {"message": "Store approved successfully", "store": {"id": store.id, "status": store.status}}


@router.patch("/stores/{store_id}/reject")
async def reject_store(
    store_id: int,
    req: ReasonRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_super_admin),
):
    store = _get_store(db, store_id)
    store.status = "rejected"
    store.rejection_reason = req.reason
    db.commit()

    audit_service.record(
        db, admin, "store_rejected", "store", f"Rejected store {store.name}: {req.reason}", request=request
    )
    owner = _owner(db, store)
    if owner:
        mail_service.send_store_rejected_email(owner.email, owner.name, store.name, req.reason)
    return {"message": "Store rejected", "store": {"id": store.id, "status": store.status}}


@router.patch("/stores/{store_id}/suspend")
async def suspend_store(
    store_id: int,
    req: ReasonRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_super_admin),
):
    """Suspend a store and take its catalogue offline"""
    store = _get_store(db, store_id)
    store.status = "suspended"
    store.suspension_reason = req.reason
    suspended = catalog_service.suspend_store_products(db, store.id)
    db.commit()

    logger.info(f"store suspended: id={store.id}, products_suspended={suspended}")
    audit_service.record(
        db, admin, "store_suspended", "store", f"Suspended store {store.name}: {req.reason}", request=request
    )
    return {"message": "Store suspended successfully"}


@router.patch("/documents/{document_id}/approve")
async def approve_document(
    document_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_super_admin),
):
    doc = db.query(StoreDocument).filter(StoreDocument.id == document_id).first()
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")

    doc.status = "approved"
    doc.rejection_reason = None
    db.commit()
    audit_service.record(
        db, admin, "document_approved", "store", f"Approved {doc.type} for store {doc.store_id}", request=request
    )
    return {"message": "Document approved successfully", "document": _document_dict(doc)}


@router.patch("/documents/{document_id}/reject")
async def reject_document(
    document_id: int,
    req: ReasonRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_super_admin),
):
    doc = db.query(StoreDocument).filter(StoreDocument.id == document_id).first()
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")

    doc.status = "rejected"
    doc.rejection_reason = req.reason
    db.commit()
    audit_service.record(
        db, admin, "document_rejected", "store", f"Rejected {doc.type} for store {doc.store_id}", request=request
    )
    return {"message": "Document rejected successfully", "document": _document_dict(doc)}
