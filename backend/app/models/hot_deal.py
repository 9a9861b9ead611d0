from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, Numeric, ForeignKey, func
from app.core.database import Base


class HotDeal(Base):
    __tablename__ = "hot_deals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True,
        comment="NULL once the product is deleted; the row still holds its slot",
    )
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    subscription_code = Column(String(40), nullable=True, index=True, comment="Owning subscription (slot key)")
    plan_type = Column(String(20), nullable=False, default="basic", comment="Plan snapshot at creation")
    original_price = Column(Numeric(12, 2), nullable=False)
    deal_price = Column(Numeric(12, 2), nullable=False)
    discount_percentage = Column(Integer, nullable=False, default=0)
    deal_start_at = Column(DateTime, nullable=False, index=True)
    deal_end_at = Column(DateTime, nullable=False, index=True)
    deal_description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    activated_at = Column(DateTime, nullable=True)
    deactivated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    def is_currently_active(self, now: datetime) -> bool:
        """Visible on the storefront: flag set AND inside the deal window"""
        return bool(self.is_active) and self.deal_start_at <= now <= self.deal_end_at
