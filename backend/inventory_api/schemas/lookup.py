from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LookupIn(BaseModel):
    """Payload for colors and series: just a name."""

    name: str = Field(min_length=1, max_length=100)


class LookupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_by: Optional[str] = None
    created_at: datetime
