from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, Numeric, Enum as SAEnum, func
from app.core.database import Base

PLAN_TYPES = ("basic", "silver", "gold", "platinum")


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    plan_type = Column(
        SAEnum(*PLAN_TYPES, name="plan_type"),
        nullable=False,
        default="basic",
        comment="Tier that governs promotion slots and durations",
    )
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0, comment="Monthly price (NGN)")
    product_limit = Column(Integer, nullable=False, default=0)

    # Bank transfer details shown on the upgrade page
    bank_account_name = Column(String(255), nullable=True)
    bank_account_number = Column(String(50), nullable=True)
    bank_name = Column(String(255), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
