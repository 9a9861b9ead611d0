from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal


class UpgradeRequest(BaseModel):
    plan_id: int
    payment_receipt_path: str = Field(min_length=1, max_length=500)


class RejectRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=1000)


class PlanUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    product_limit: Optional[int] = Field(default=None, ge=0)
    bank_account_name: Optional[str] = Field(default=None, max_length=255)
    bank_account_number: Optional[str] = Field(default=None, max_length=50)
    bank_name: Optional[str] = Field(default=None, max_length=255)
    is_active: Optional[bool] = None
