from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SAEnum, func
from app.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SAEnum("buyer", "seller", "admin", "super_admin", name="user_role"),
        nullable=False,
        default="buyer",
    )
    is_active = Column(Boolean, nullable=False, default=True)
    profile_image_path = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
