"""
Report Schemas
The envelope is validated by FastAPI; the per-type parameters are
validated by the report service so failures surface as MissingParameters.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from utility_billing.schemas.common import ensure_ordered, iso_string


class GenerateReportRequest(BaseModel):
    report_type: str = Field(..., min_length=1)
    parameters: Optional[Dict[str, Any]] = None
    send_email: bool = False


class ConsumptionReportParams(BaseModel):
    meter_id: str = Field(..., min_length=1)
    start_date: str
    end_date: str

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _iso(cls, v: Any) -> str:
        return iso_string(v)

    @model_validator(mode="after")
    def _order(self) -> "ConsumptionReportParams":
        ensure_ordered(self.start_date, self.end_date, "report period")
        return self


class BillingReportParams(BaseModel):
    billing_period_start: str
    billing_period_end: str
    user_id: Optional[str] = None

    @field_validator("billing_period_start", "billing_period_end", mode="before")
    @classmethod
    def _iso(cls, v: Any) -> str:
        return iso_string(v)

    @model_validator(mode="after")
    def _order(self) -> "BillingReportParams":
        ensure_ordered(self.billing_period_start, self.billing_period_end, "billing period")
        return self


class TransactionsReportParams(BaseModel):
    start_date: str
    end_date: str
    transaction_type: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _iso(cls, v: Any) -> str:
        return iso_string(v)

    @model_validator(mode="after")
    def _order(self) -> "TransactionsReportParams":
        ensure_ordered(self.start_date, self.end_date, "report period")
        return self
