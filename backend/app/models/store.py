from sqlalchemy import Column, Integer, String, Text, DateTime, Enum as SAEnum, ForeignKey, func
from app.core.database import Base


class Store(Base):
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    rc_number = Column(String(100), nullable=True, unique=True, comment="CAC registration number")
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    business_lines = Column(Text, nullable=True, comment="Comma-separated business lines")
    state = Column(Text, nullable=True, comment="Comma-separated list of states")
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    contact_person = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)
    status = Column(
        SAEnum("pending", "approved", "rejected", "suspended", name="store_status"),
        nullable=False,
        default="pending",
        index=True,
    )
    subscription = Column(String(50), nullable=False, default="basic", comment="Current plan slug")
    approved_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    suspension_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
