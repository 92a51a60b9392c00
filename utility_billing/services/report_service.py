"""
Report Assembly

Three report types, each built from rows already in the store:
  consumption:  per-day deltas between consecutive readings of one meter
  billing:      bills overlapping a period, their payments and balances
  transactions: the caller's transactions with per-type completed totals

Every assembled report is recorded in the reports table.
"""
import logging
from typing import Any, Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from utility_billing.core.dates import day_key, period_bounds
from utility_billing.core.exceptions import MissingParameters, StoreError, UnsupportedReportType
from utility_billing.core.money import round_money, sum_money
from utility_billing.core.security import Caller, get_owned_meter, resolve_caller, resolve_target_user
from utility_billing.models import ReportType, TransactionStatus, TransactionType
from utility_billing.schemas.report import (
    BillingReportParams,
    ConsumptionReportParams,
    GenerateReportRequest,
    TransactionsReportParams,
)
from utility_billing.services.payment_service import parse_transaction_type
from utility_billing.services.store import BillingStore

logger = logging.getLogger(__name__)


# ==================== Builders ====================

def daily_consumption(readings: list) -> list:
    """One row per consecutive pair of readings, dated by the later reading; the first reading only opens the series"""
    rows = []
    for previous, reading in zip(readings, readings[1:]):
        rows.append({
            "date": day_key(reading["reading_date"]),
            "consumption": round(float(reading["reading"]) - float(previous["reading"]), 4),
            "reading": reading["reading"],
            "previous_reading": previous["reading"],
        })
    return rows


def build_consumption_report(store: BillingStore, caller: Caller, params: ConsumptionReportParams) -> Dict[str, Any]:
    meter = get_owned_meter(store, caller, params.meter_id, "You do not have access to this meter")

    start, end = period_bounds(params.start_date, params.end_date)
    readings = store.get_readings(params.meter_id, start, end)
    daily = daily_consumption(readings)
    total = round(sum(item["consumption"] for item in daily), 4)

    return {
        "meter": meter,
        "period": {"start_date": params.start_date, "end_date": params.end_date},
        "readings": len(readings),
        "daily_consumption": daily,
        "total_consumption": total,
        "average_daily_consumption": round(total / len(daily), 4) if daily else 0,
    }


def build_billing_report(store: BillingStore, caller: Caller, params: BillingReportParams) -> Dict[str, Any]:
    target_user_id = resolve_target_user(caller, params.user_id)

    start, end = period_bounds(params.billing_period_start, params.billing_period_end)
    bills = store.get_bills(target_user_id, start, end)
    transactions = store.get_transactions_for_bills([bill["id"] for bill in bills])

    total_billed = sum_money(bill["total_amount"] for bill in bills)
    total_paid = sum_money(
        t["amount"] for t in transactions if t["status"] == TransactionStatus.COMPLETED.value
    )

    return {
        "period": {
            "billing_period_start": params.billing_period_start,
            "billing_period_end": params.billing_period_end,
        },
        "user_id": target_user_id,
        "bills": bills,
        "transactions": transactions,
        "total_billed": total_billed,
        "total_paid": total_paid,
        "total_outstanding": round_money(total_billed - total_paid),
    }


def build_transactions_report(store: BillingStore, caller: Caller, params: TransactionsReportParams) -> Dict[str, Any]:
    target_user_id = resolve_target_user(caller, params.user_id)

    start, end = period_bounds(params.start_date, params.end_date)
    transactions = store.get_transactions(target_user_id, start, end, params.transaction_type)

    totals = {t.value: 0.0 for t in TransactionType}
    for t in transactions:
        if t["status"] == TransactionStatus.COMPLETED.value and t["transaction_type"] in totals:
            totals[t["transaction_type"]] = round_money(totals[t["transaction_type"]] + float(t["amount"]))

    return {
        "period": {"start_date": params.start_date, "end_date": params.end_date},
        "transactions": transactions,
        "totals": totals,
        "count": len(transactions),
    }


REPORT_BUILDERS: Dict[str, Tuple[Type[BaseModel], Callable]] = {
    ReportType.CONSUMPTION.value: (ConsumptionReportParams, build_consumption_report),
    ReportType.BILLING.value: (BillingReportParams, build_billing_report),
    ReportType.TRANSACTIONS.value: (TransactionsReportParams, build_transactions_report),
}


# ==================== Entry point ====================

def _validate_parameters(report_type: str, model: Type[BaseModel], parameters: Dict[str, Any]) -> BaseModel:
    try:
        params = model.model_validate(parameters)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) if err["loc"] else "parameters" for err in e.errors()})
        raise MissingParameters(
            f"Missing or invalid parameters for {report_type} report: {', '.join(fields)}",
            [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()],
        )

    transaction_type = getattr(params, "transaction_type", None)
    if transaction_type:
        parse_transaction_type(transaction_type)
    return params


def generate_report(store: BillingStore, request: GenerateReportRequest) -> Tuple[Dict[str, Any], Optional[str]]:
    """
    Assemble a report and record that it was generated.

    Returns:
        (report data, id of the audit row or None if recording failed)
    """
    if request.report_type not in REPORT_BUILDERS:
        raise UnsupportedReportType(f"Unsupported report type: {request.report_type}")

    if request.parameters is None:
        raise MissingParameters(f"Missing required field: parameters for {request.report_type} report")

    model, builder = REPORT_BUILDERS[request.report_type]
    params = _validate_parameters(request.report_type, model, request.parameters)

    caller = resolve_caller(store)
    report = builder(store, caller, params)

    report_id = None
    try:
        record = store.insert_report({
            "user_id": caller.id,
            "report_type": request.report_type,
            "parameters": request.parameters,
        })
        report_id = record.get("id")
    except StoreError as e:
        logger.error(f"Error recording {request.report_type} report for {caller.id}: {e.message}")

    if request.send_email:
        # Mail delivery is handled outside this service
        logger.info(f"Email delivery requested for {request.report_type} report {report_id}; no mail transport configured")

    return report, report_id
