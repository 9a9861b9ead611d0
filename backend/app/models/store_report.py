from sqlalchemy import Column, Integer, Text, DateTime, Enum as SAEnum, ForeignKey, UniqueConstraint, func
from app.core.database import Base

REPORT_REASONS = (
    "inappropriate_content",
    "fraudulent_activity",
    "poor_quality",
    "fake_products",
    "misleading_information",
    "unprofessional_behavior",
    "scam",
    "other",
)


class StoreReport(Base):
    __tablename__ = "store_reports"
    __table_args__ = (UniqueConstraint("store_id", "reported_by", name="uq_store_reports_store_reporter"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    reported_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    reason = Column(SAEnum(*REPORT_REASONS, name="report_reason"), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        SAEnum("pending", "reviewed", "resolved", "dismissed", name="report_status"),
        nullable=False,
        default="pending",
    )
    admin_notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
