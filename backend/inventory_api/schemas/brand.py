from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


class BrandCreate(BaseModel):
    brand_code: Optional[str] = None  # allocated from the Brand sequence when omitted
    brand_name: str = Field(max_length=255)
    supplier_name: str = Field(max_length=255)

    @field_validator("brand_name", "supplier_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return _strip_required(value)

    @field_validator("brand_code")
    @classmethod
    def _blank_code_means_auto(cls, value: Optional[str]) -> Optional[str]:
        return (value or "").strip() or None


class BrandUpdate(BaseModel):
    expected_updated_at: Optional[datetime]
    brand_name: Optional[str] = Field(default=None, max_length=255)
    supplier_name: Optional[str] = Field(default=None, max_length=255)

    @field_validator("brand_name", "supplier_name")
    @classmethod
    def _not_blank(cls, value: Optional[str]) -> Optional[str]:
        # None means "leave unchanged"; an explicit value must carry text.
        return value if value is None else _strip_required(value)


class BrandOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    brand_code: str
    brand_name: str
    supplier_name: str
    created_by: str
    created_at: datetime
    updated_by: Optional[str] = None
    updated_at: datetime


class BrandListOut(BaseModel):
    items: List[BrandOut]
    total: int
    page: int
    total_pages: int
