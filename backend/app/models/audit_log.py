from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Enum as SAEnum, ForeignKey, func
from app.core.database import Base

AUDIT_CATEGORIES = ("user", "store", "product", "subscription", "settings", "security")


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    user_name = Column(String(255), nullable=False)
    user_email = Column(String(255), nullable=False)
    action = Column(String(100), nullable=False)
    category = Column(SAEnum(*AUDIT_CATEGORIES, name="audit_category"), nullable=False, index=True)
    details = Column(Text, nullable=False)
    ip_address = Column(String(45), nullable=True)
    # "metadata" is reserved on declarative classes
    extra = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
