"""
Meter Reading Recording

Stores a reading for a meter the caller may act on. Consumption and
prepaid balance are derived by the data store's triggers on insert, so
the meter is read back afterwards to return its updated state.
"""
import logging
from typing import Any, Dict

from utility_billing.core.dates import parse_timestamp, utcnow
from utility_billing.core.exceptions import StoreError
from utility_billing.core.security import get_owned_meter, resolve_caller
from utility_billing.schemas.meter import MeterReadingCreate
from utility_billing.services.store import BillingStore

logger = logging.getLogger(__name__)


def process_meter_reading(store: BillingStore, request: MeterReadingCreate) -> Dict[str, Any]:
    caller = resolve_caller(store)
    meter = get_owned_meter(
        store, caller, request.meter_id,
        "You do not have permission to record readings for this meter",
    )

    reading = store.insert_reading({
        "meter_id": request.meter_id,
        "reading": request.reading,
        "reading_date": parse_timestamp(request.reading_date) if request.reading_date else utcnow(),
        "is_manual": request.is_manual,
        "notes": request.notes,
    })
    logger.info(f"Recorded reading {request.reading} for meter {request.meter_id}")

    try:
        updated_meter = store.get_meter(request.meter_id)
    except StoreError as e:
        logger.error(f"Error fetching updated meter data: {e.message}")
        updated_meter = None

    return {"reading": reading, "meter": updated_meter or meter}
