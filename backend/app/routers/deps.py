"""Shared dependencies: authentication and role checks"""
from typing import Optional
from fastapi import Request, HTTPException, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.redis import get_redis
from app.core.session import get_session
from app.models.store import Store
from app.models.user import User

ADMIN_ROLES = ("admin", "super_admin")


async def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    r=Depends(get_redis),
) -> Optional[User]:
    """Cookie -> Redis -> DB. None when not logged in"""
    session_id = request.cookies.get("session_id")
    if not session_id:
        return None

    session_data = await get_session(r, session_id)
    if not session_data:
        return None

    user_id = int(session_data.get("user_id", 0))
    if not user_id:
        return None

    user = db.query(User).filter(User.id == user_id, User.is_active == True).first()
    return user


async def require_login(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    """401 unless logged in"""
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user


async def require_admin(
    user: User = Depends(require_login),
) -> User:
    """403 unless admin or super admin"""
    if user.role not in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


async def require_super_admin(
    user: User = Depends(require_login),
) -> User:
    if user.role != "super_admin":
        raise HTTPException(status_code=403, detail="Super admin access required")
    return user


async def require_seller_store(
    user: User = Depends(require_login),
    db: Session = Depends(get_db),
) -> Store:
    """The logged-in seller's store. 403 for other roles, 404 when no store exists"""
    if user.role != "seller":
        raise HTTPException(status_code=403, detail="Seller access required")
    store = db.query(Store).filter(Store.user_id == user.id).first()
    if store is None:
        raise HTTPException(status_code=404, detail="Store not found")
    return store
