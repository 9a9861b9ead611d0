"""Seller onboarding: store application and its review status"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.rate_limit import limiter, REGISTER_RATE_LIMIT
from app.models.store import Store
from app.models.store_document import StoreDocument
from app.models.user import User
from app.routers.deps import ADMIN_ROLES, require_login
from app.routers.presenters import iso
from app.schemas.store import SellerRegistrationRequest
from app.services import store_service

router = APIRouter(prefix="/api/seller", tags=["seller-registration"])


@router.post("/register", status_code=201)
@limiter.limit(REGISTER_RATE_LIMIT)
async def register_seller(
    request: Request,
    req: SellerRegistrationRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_login),
):
    """Submit company details and document uploads for review"""
    if user.role in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Admin accounts cannot open a store")

    store = store_service.register_store(
        db,
        user,
        company_name=req.company_name,
        rc_number=req.rc_number,
        phone=req.phone,
        address=req.address,
        contact_person=req.contact_person,
        business_lines=req.business_lines,
        product_line=req.product_line,
        states=req.states,
        documents=[d.model_dump() for d in req.documents],
    )
    return {
        "message": "Seller registration submitted successfully",
        "store_id": store.id,
        "user_id": user.id,
        "status": store.status,
        "role": user.role,
        "next_steps": "Your application will be reviewed within 24-48 hours. You now have access to the seller dashboard.",
    }


@router.get("/registration/{store_id}/status")
async def registration_status(
    store_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_login),
):
    store = db.query(Store).filter(Store.id == store_id).first()
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")
    if store.user_id != user.id and user.role != "super_admin":
        raise HTTPException(status_code=403, detail="Unauthorized")

    documents = db.query(StoreDocument).filter(StoreDocument.store_id == store.id).order_by(StoreDocument.id).all()
    return {
        "id": store.id,
        "name": store.name,
        "status": store.status,
        "rejection_reason": store.rejection_reason,
        "approved_at": iso(store.approved_at),
        "documents": [
            {"type": d.type, "status": d.status, "file_path": d.file_path, "rejection_reason": d.rejection_reason}
            for d in documents
        ],
    }
