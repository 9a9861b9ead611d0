"""Account business logic"""
import bcrypt
from sqlalchemy.orm import Session
from typing import Optional

from app.models.user import User
from app.models.store import Store
from app.core.logging import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt"""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    role: str = "buyer",
    phone: Optional[str] = None,
) -> User:
    user = User(
        name=name,
        email=email.lower().strip(),
        phone=phone,
        password_hash=hash_password(password),
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"user created: id={user.id}, role={role}")
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """Active user matching the credentials, or None"""
    user = get_user_by_email(db, email)
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower().strip()).first()


def get_store_for_user(db: Session, user_id: int) -> Optional[Store]:
    return db.query(Store).filter(Store.user_id == user_id).first()
