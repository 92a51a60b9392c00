"""
Bill Generation

For every requested postpaid meter:
  1. readings inside the billing period, oldest first
  2. consumption = last reading - first reading
  3. amount = consumption x tariff, tax = amount x TAX_RATE, total = amount + tax
  4. persist the bill as pending and notify the meter's owner

A failure on one meter is itemised in the error list and the run carries
on with the next meter. Prepaid and unknown meter ids are skipped.
"""
import logging
import time
from typing import Any, Dict, List, Optional

from utility_billing.core.config import settings
from utility_billing.core.dates import as_date, period_bounds
from utility_billing.core.exceptions import NotFound, StoreError
from utility_billing.core.money import round_money
from utility_billing.core.security import Caller, can_access
from utility_billing.models import BillingType, BillStatus, NotificationType
from utility_billing.schemas.billing import GenerateBillsRequest
from utility_billing.services.store import BillingStore, Row

logger = logging.getLogger(__name__)


class MeterBillingError(Exception):
    """Billing one meter failed; the rest of the run is unaffected"""

    def __init__(self, meter_id: str, code: str, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.meter_id = meter_id
        self.code = code
        self.message = message
        self.details = details

    def to_item(self) -> Dict[str, Any]:
        item = {"meter_id": self.meter_id, "code": self.code, "error": self.message}
        if self.details is not None:
            item["details"] = self.details
        return item


def bill_number(meter_number: str) -> str:
    return f"{settings.BILL_NUMBER_PREFIX}-{meter_number}-{int(time.time() * 1000)}"


def calculate_charges(first_reading: float, last_reading: float, tariff_rate: float) -> Dict[str, float]:
    consumption = round(float(last_reading) - float(first_reading), 4)
    amount = round_money(consumption * float(tariff_rate))
    tax_amount = round_money(amount * settings.TAX_RATE)
    return {
        "consumption": consumption,
        "amount": amount,
        "tax_amount": tax_amount,
        "total_amount": round_money(amount + tax_amount),
    }


def _bill_meter(store: BillingStore, caller: Caller, meter: Row, request: GenerateBillsRequest) -> Row:
    meter_id = meter["id"]

    if not can_access(caller, meter.get("user_id")):
        raise MeterBillingError(meter_id, "Forbidden", "You do not have permission to bill this meter")

    tariff_rate = float(meter.get("tariff_rate") or 0)
    if tariff_rate < 0:
        raise MeterBillingError(meter_id, "InvalidTariffRate", "Meter has a negative tariff rate")

    start, end = period_bounds(request.billing_period_start, request.billing_period_end)
    readings = store.get_readings(meter_id, start, end)
    if not readings:
        raise MeterBillingError(meter_id, "NoReadingsInPeriod", "No readings found for the billing period")

    first, last = readings[0], readings[-1]
    charges = calculate_charges(first["reading"], last["reading"], tariff_rate)
    if charges["consumption"] < 0:
        raise MeterBillingError(
            meter_id,
            "NegativeConsumption",
            "Last reading is lower than the first reading of the period",
            {"previous_reading": first["reading"], "current_reading": last["reading"]},
        )

    number = bill_number(meter["meter_number"])
    bill = store.insert_bill({
        "meter_id": meter_id,
        "bill_number": number,
        "billing_period_start": as_date(request.billing_period_start),
        "billing_period_end": as_date(request.billing_period_end),
        "previous_reading": first["reading"],
        "current_reading": last["reading"],
        "rate": tariff_rate,
        "due_date": as_date(request.due_date),
        "status": BillStatus.PENDING.value,
        **charges,
    })
    logger.info(f"Created bill {number} for meter {meter_id}: total {charges['total_amount']:.2f}")

    try:
        store.insert_notification({
            "user_id": meter["user_id"],
            "meter_id": meter_id,
            "title": "New Bill Generated",
            "message": (
                f"A new bill ({number}) has been generated for your {meter.get('meter_type', 'utility')} meter. "
                f"Amount: {charges['total_amount']:.2f}. Due date: {request.due_date}"
            ),
            "notification_type": NotificationType.INFO.value,
        })
    except StoreError as e:
        logger.error(f"Bill {number} created but owner notification failed: {e.message}")

    return bill


def generate_bills(store: BillingStore, caller: Caller, request: GenerateBillsRequest) -> Dict[str, List[Dict[str, Any]]]:
    """
    Run billing for the requested meters.

    Returns:
        {"bills": [...created bills], "errors": [...per-meter errors]}

    Raises:
        NotFound: none of the ids is a postpaid meter
        StoreError: the meter lookup itself failed
    """
    meters = store.get_meters(request.meter_ids, billing_type=BillingType.POSTPAID.value)
    if not meters:
        raise NotFound("No valid postpaid meters found for the provided IDs")

    skipped = len(request.meter_ids) - len(meters)
    if skipped:
        logger.info(f"Skipping {skipped} meter id(s) that are unknown or not postpaid")

    bills = []
    errors = []
    for meter in meters:
        try:
            bills.append(_bill_meter(store, caller, meter, request))
        except MeterBillingError as e:
            logger.warning(f"Meter {e.meter_id} not billed: {e.message}")
            errors.append(e.to_item())
        except StoreError as e:
            errors.append({"meter_id": meter["id"], "code": e.code, "error": e.message, "details": e.details})

    return {"bills": bills, "errors": errors}
