"""
Bill Generation Schemas
"""
from typing import Any, List

from pydantic import BaseModel, Field, field_validator, model_validator

from utility_billing.schemas.common import ensure_ordered, iso_string


class GenerateBillsRequest(BaseModel):
    meter_ids: List[str] = Field(..., description="One meter id or a list of meter ids")
    billing_period_start: str
    billing_period_end: str
    due_date: str

    @field_validator("meter_ids", mode="before")
    @classmethod
    def _as_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("meter_ids")
    @classmethod
    def _not_empty(cls, v: List[str]) -> List[str]:
        ids = [meter_id.strip() for meter_id in v if meter_id and meter_id.strip()]
        if not ids:
            raise ValueError("at least one meter id is required")
        # Keep first occurrence order, drop repeats
        return list(dict.fromkeys(ids))

    @field_validator("billing_period_start", "billing_period_end", "due_date", mode="before")
    @classmethod
    def _iso(cls, v: Any) -> str:
        return iso_string(v)

    @model_validator(mode="after")
    def _period_order(self) -> "GenerateBillsRequest":
        ensure_ordered(self.billing_period_start, self.billing_period_end, "billing period")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "meter_ids": ["6f1c2a4e-0000-4000-8000-000000000001"],
                "billing_period_start": "2024-01-01",
                "billing_period_end": "2024-01-30",
                "due_date": "2024-02-15",
            }
        }
