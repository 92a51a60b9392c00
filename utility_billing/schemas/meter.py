"""
Meter Reading Schemas
"""
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from utility_billing.schemas.common import optional_iso_string


class MeterReadingCreate(BaseModel):
    meter_id: str = Field(..., min_length=1)
    reading: float = Field(..., ge=0, description="Cumulative counter value")
    reading_date: Optional[str] = Field(None, description="Defaults to now")
    is_manual: bool = False
    notes: str = ""

    @field_validator("reading_date", mode="before")
    @classmethod
    def _iso(cls, v: Any) -> Optional[str]:
        return optional_iso_string(v)
