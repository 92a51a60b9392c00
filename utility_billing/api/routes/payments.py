"""
Payment Route
"""
from fastapi import APIRouter, Depends

from utility_billing.api.deps import get_store
from utility_billing.schemas.payment import ProcessPaymentRequest
from utility_billing.services.payment_service import process_payment
from utility_billing.services.store import BillingStore

router = APIRouter(tags=["payments"])


@router.post("/process-payment")
def process_payment_endpoint(
    payload: ProcessPaymentRequest,
    store: BillingStore = Depends(get_store),
):
    """Record a recharge, bill payment or refund for the caller"""
    transaction = process_payment(store, payload)
    return {
        "success": True,
        "message": f"{payload.transaction_type} processed successfully",
        "transaction": transaction,
    }
