from sqlalchemy import Column, Integer, String, Text, DateTime, Enum as SAEnum, ForeignKey, func
from app.core.database import Base

SUBSCRIPTION_STATUSES = ("pending", "active", "expired", "rejected")


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    subscription_plan_id = Column(
        Integer, ForeignKey("subscription_plans.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    subscription_code = Column(
        String(40), nullable=False, unique=True, comment="SUB-<date>-<store>-<hex>; promotion slot key"
    )
    payment_receipt_path = Column(String(500), nullable=True)
    status = Column(
        SAEnum(*SUBSCRIPTION_STATUSES, name="subscription_status"),
        nullable=False,
        default="pending",
        index=True,
    )
    starts_at = Column(DateTime, nullable=True)
    ends_at = Column(DateTime, nullable=True, index=True)
    approved_at = Column(DateTime, nullable=True)
    activated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
