from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PurchaseRequestCreate(BaseModel):
    pr_vendor: str = ""
    pr_date: Optional[date] = None
    remarks: Optional[str] = None


class PurchaseRequestUpdate(BaseModel):
    pr_vendor: Optional[str] = None
    status: Optional[str] = None
    remarks: Optional[str] = None


class PurchaseRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pr_number: str
    pr_date: date
    pr_vendor: str
    status: str
    remarks: Optional[str] = None
    created_by: str
    created_at: datetime
    updated_by: Optional[str] = None
    updated_at: datetime


class PurchaseRequestListOut(BaseModel):
    items: List[PurchaseRequestOut]
    total: int
    limit: int = Field(ge=1)
    offset: int = Field(ge=0)
