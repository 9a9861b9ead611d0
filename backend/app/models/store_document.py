from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, Enum as SAEnum, ForeignKey, func
from app.core.database import Base


class StoreDocument(Base):
    __tablename__ = "store_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(100), nullable=False, comment="cac_certificate / company_logo / ...")
    file_path = Column(String(500), nullable=False)
    mime_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)
    status = Column(
        SAEnum("pending", "approved", "rejected", name="document_status"),
        nullable=False,
        default="pending",
    )
    is_mandatory = Column(Boolean, nullable=False, default=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
