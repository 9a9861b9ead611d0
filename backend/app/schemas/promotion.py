from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class HotDealCreate(BaseModel):
    product_id: int
    deal_price: Decimal = Field(ge=0)
    deal_start_at: datetime
    deal_end_at: datetime
    deal_description: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def check_window(self):
        if self.deal_end_at <= self.deal_start_at:
            raise ValueError("deal_end_at must be after deal_start_at")
        return self


class HotDealUpdate(BaseModel):
    deal_price: Optional[Decimal] = Field(default=None, ge=0)
    deal_end_at: Optional[datetime] = None
    deal_description: Optional[str] = Field(default=None, max_length=2000)
