"""Admin: user accounts"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.store import Store
from app.models.user import User
from app.routers.deps import require_super_admin
from app.routers.presenters import iso
from app.schemas.auth import UserUpdate
from app.services import audit_service

router = APIRouter(prefix="/api/admin/users", tags=["admin-users"])


def _user_dict(user: User, store: Optional[Store] = None) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role,
        "is_active": user.is_active,
        "store": {"id": store.id, "name": store.name, "status": store.status} if store else None,
        "created_at": iso(user.created_at),
    }


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    search: Optional[str] = None,
    role: Optional[str] = None,
    db: Session = Depends(get_db),
    _=Depends(require_super_admin),
):
    q = db.query(User, Store).outerjoin(Store, Store.user_id == User.id)
    if search:
        like = f"%{search}%"
        q = q.filter(or_(User.email.like(like), User.name.like(like)))
    if role:
        q = q.filter(User.role == role)

    total = q.count()
    rows = q.order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * per_page).limit(per_page).all()
    return {
        "total": total,
        "page": page,
        "per_page": per_page,
        "users": [_user_dict(user, store) for user, store in rows],
    }


@router.get("/{user_id}")
async def get_user(user_id: int, db: Session = Depends(get_db), _=Depends(require_super_admin)):
    user = _get_user(db, user_id)
    store = db.query(Store).filter(Store.user_id == user.id).first()
    return _user_dict(user, store)


@router.patch("/{user_id}")
async def update_user(
    user_id: int,
    data: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_super_admin),
):
    """Change role or enable/disable an account. Disabled accounts fail every session check"""
    user = _get_user(db, user_id)
    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot change your own account here")

    changes = []
    if data.role is not None and data.role != user.role:
        changes.append(f"role {user.role} -> {data.role}")
        user.role = data.role
    if data.is_active is not None and data.is_active != user.is_active:
        changes.append("enabled" if data.is_active else "disabled")
        user.is_active = data.is_active
    db.commit()

    if changes:
        audit_service.record(
            db, admin, "user_updated", "user", f"Updated {user.email}: {', '.join(changes)}", request=request
        )
    return {"message": "User updated", "user": _user_dict(user)}
