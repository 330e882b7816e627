from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ProductType = Literal["Rough", "Trim"]


class ProductBase(BaseModel):
    product_code: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    brand: str = Field(min_length=1)
    product_type: ProductType
    color: str = Field(min_length=1)
    series: Optional[str] = None
    category: str = Field(min_length=1)
    sub_category: str = Field(min_length=1)
    mrp: Decimal = Field(gt=0)
    gst: Decimal = Field(default=Decimal("0"), ge=0, le=Decimal("99.99"))
    opening_stock: int = Field(default=0, ge=0)
    fresh_stock: int = Field(default=0, ge=0)
    damage_stock: int = Field(default=0, ge=0)
    notes: Optional[str] = None


class ProductCreate(ProductBase):
    prod_id: Optional[str] = None


class ProductUpdate(BaseModel):
    expected_updated_at: Optional[datetime]
    product_code: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    product_type: Optional[ProductType] = None
    color: Optional[str] = None
    series: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    mrp: Optional[Decimal] = Field(default=None, gt=0)
    gst: Optional[Decimal] = Field(default=None, ge=0, le=Decimal("99.99"))
    opening_stock: Optional[int] = Field(default=None, ge=0)
    fresh_stock: Optional[int] = Field(default=None, ge=0)
    damage_stock: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class ProductOut(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    prod_id: str
    created_by: str
    created_at: datetime
    updated_by: Optional[str] = None
    updated_at: datetime


class ProductListOut(BaseModel):
    items: List[ProductOut]
    total: int
