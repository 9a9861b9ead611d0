from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=255, description="Category name")
    description: Optional[str] = None
    old_price: Optional[Decimal] = Field(default=None, ge=0)
    new_price: Optional[Decimal] = Field(default=None, ge=0)
    specifications: Optional[dict] = None
    status: Literal["draft", "active", "suspended"] = "active"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    old_price: Optional[Decimal] = Field(default=None, ge=0)
    new_price: Optional[Decimal] = Field(default=None, ge=0)
    specifications: Optional[dict] = None
    status: Optional[Literal["draft", "active", "suspended"]] = None
