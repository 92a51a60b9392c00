"""
Meter Reading Route
"""
from fastapi import APIRouter, Depends

from utility_billing.api.deps import get_store
from utility_billing.schemas.meter import MeterReadingCreate
from utility_billing.services.reading_service import process_meter_reading
from utility_billing.services.store import BillingStore

router = APIRouter(tags=["readings"])


@router.post("/process-meter-readings")
def process_meter_reading_endpoint(
    payload: MeterReadingCreate,
    store: BillingStore = Depends(get_store),
):
    """Record a meter reading; consumption and balance follow from the store's triggers"""
    result = process_meter_reading(store, payload)
    return {
        "success": True,
        "message": "Meter reading processed successfully",
        **result,
    }
