"""
Payment Request Schemas
"""
from typing import Optional

from pydantic import BaseModel, Field


class ProcessPaymentRequest(BaseModel):
    # Checked against TransactionType by the service so an unknown kind
    # gets its own error instead of a generic validation failure
    transaction_type: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, description="Amount in the meter's currency")
    payment_method: str = Field(..., min_length=1)
    meter_id: Optional[str] = None
    bill_id: Optional[str] = None
    payment_reference: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "transaction_type": "payment",
                "bill_id": "0d3f8c1e-0000-4000-8000-000000000002",
                "amount": 420.0,
                "payment_method": "upi",
                "payment_reference": "UPI-88213",
            }
        }
