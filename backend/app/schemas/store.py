from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from app.models.store_report import REPORT_REASONS

ReportReason = Literal[REPORT_REASONS]


class ReasonRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=1000)


class StoreReportCreate(BaseModel):
    reason: ReportReason
    description: Optional[str] = Field(default=None, max_length=2000)


class ReportStatusUpdate(BaseModel):
    status: Literal["pending", "reviewed", "resolved", "dismissed"]
    admin_notes: Optional[str] = Field(default=None, max_length=2000)


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: bool = True


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class StoreDocumentIn(BaseModel):
    type: str = Field(min_length=1, max_length=100)
    file_path: str = Field(min_length=1, max_length=500)
    mime_type: Optional[str] = Field(default=None, max_length=100)
    file_size: Optional[int] = Field(default=None, ge=0, le=5 * 1024 * 1024)


class SellerRegistrationRequest(BaseModel):
    company_name: str = Field(min_length=1, max_length=255)
    rc_number: str = Field(min_length=1, max_length=50)
    phone: str = Field(min_length=1, max_length=20)
    address: str = Field(min_length=1)
    contact_person: str = Field(min_length=1, max_length=255)
    business_lines: list[str] = Field(min_length=1)
    product_line: str = Field(min_length=3)
    states: list[str] = Field(min_length=1)
    documents: list[StoreDocumentIn] = Field(min_length=1)


class StoreUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, min_length=1, max_length=20)
    address: Optional[str] = Field(default=None, min_length=1, max_length=500)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    website: Optional[str] = Field(default=None, max_length=255)


class LogoRequest(BaseModel):
    file_path: str = Field(min_length=1, max_length=500)
    mime_type: Optional[str] = Field(default=None, max_length=100)
    file_size: Optional[int] = Field(default=None, ge=0, le=5 * 1024 * 1024)
