"""Account settings: profile and password"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.logging import get_logger
from app.models.user import User
from app.routers.deps import require_login
from app.schemas.auth import ChangePasswordRequest, ProfileUpdate
from app.services import auth_service

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["me"])


@router.put("/profile")
async def update_profile(
    data: ProfileUpdate,
    user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    email = data.email.lower().strip()
    if email != user.email:
        existing = auth_service.get_user_by_email(db, email)
        if existing and existing.id != user.id:
            raise HTTPException(status_code=422, detail="An account with this email already exists")
        user.email = email
    user.name = data.name
    user.phone = data.phone
    db.commit()
    db.refresh(user)
    return {
        "message": "Profile updated successfully",
        "user": {"id": user.id, "name": user.name, "email": user.email, "phone": user.phone, "role": user.role},
    }


@router.post("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    if data.new_password != data.new_password_confirmation:
        raise HTTPException(status_code=422, detail="Password confirmation does not match")
    if not auth_service.verify_password(data.current_password, user.password_hash):
        raise HTTPException(status_code=422, detail="Current password is incorrect")

    user.password_hash = auth_service.hash_password(data.new_password)
    db.commit()
    logger.info(f"password changed: user_id={user.id}")
    return {"message": "Password changed successfully"}
