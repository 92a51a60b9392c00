"""
Bill Generation Route
"""
from fastapi import APIRouter, Depends
import logging

from utility_billing.api.deps import get_store
from utility_billing.core.security import resolve_caller
from utility_billing.schemas.billing import GenerateBillsRequest
from utility_billing.services.billing_service import generate_bills
from utility_billing.services.store import BillingStore

router = APIRouter(tags=["billing"])
logger = logging.getLogger(__name__)


@router.post("/generate-bills")
def generate_bills_endpoint(
    payload: GenerateBillsRequest,
    store: BillingStore = Depends(get_store),
):
    """
    Generate pending bills for postpaid meters over a billing period.

    Partial success is normal: meters that could not be billed are listed
    under "errors" while the other bills are still created.
    """
    caller = resolve_caller(store)
    logger.info(f"[GENERATE_BILLS] user={caller.id} meters={len(payload.meter_ids)}")

    result = generate_bills(store, caller, payload)

    response = {
        "success": True,
        "message": f"Generated {len(result['bills'])} bills",
        "bills": result["bills"],
    }
    if result["errors"]:
        response["errors"] = result["errors"]
    return response
