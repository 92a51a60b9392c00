"""
Payment Recording

Records a recharge, bill payment or refund for the caller. No gateway is
contacted: with SIMULATE_PAYMENT_CAPTURE on, the capture is treated as
successful and the transaction is stored as completed. Balance and bill
status updates are left to the data store's triggers.
"""
import logging
import random
import time
from typing import Optional

from utility_billing.core.config import settings
from utility_billing.core.dates import utcnow
from utility_billing.core.exceptions import InvalidTransactionType, MissingReference, StoreError
from utility_billing.core.security import get_owned_bill, get_owned_meter, resolve_caller
from utility_billing.models import NotificationType, TransactionStatus, TransactionType
from utility_billing.schemas.payment import ProcessPaymentRequest
from utility_billing.services.store import BillingStore, Row

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = [t.value for t in TransactionType]


def parse_transaction_type(value: str) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise InvalidTransactionType(
            f"Invalid transaction_type. Must be one of: {', '.join(TRANSACTION_TYPES)}"
        )


def transaction_number() -> str:
    # Random suffix separates transactions created in the same millisecond
    return f"{settings.TRANSACTION_NUMBER_PREFIX}-{int(time.time() * 1000)}-{random.randint(0, 999)}"


def _validate_references(transaction_type: TransactionType, request: ProcessPaymentRequest) -> None:
    if transaction_type == TransactionType.RECHARGE and not request.meter_id:
        raise MissingReference("meter_id is required for recharge transactions")
    if transaction_type == TransactionType.PAYMENT and not request.bill_id:
        raise MissingReference("bill_id is required for payment transactions")


def _notification_message(
    transaction_type: TransactionType,
    amount: float,
    number: str,
    status: TransactionStatus,
    bill: Optional[Row],
) -> str:
    subject = f"Your {transaction_type.value} of {amount:.2f}"
    if bill:
        subject += f" for bill {bill['bill_number']}"
    if status == TransactionStatus.COMPLETED:
        return f"{subject} was processed successfully. Transaction ID: {number}"
    return f"{subject} was received and is awaiting confirmation. Transaction ID: {number}"


def process_payment(store: BillingStore, request: ProcessPaymentRequest) -> Row:
    """
    Validate, authorize and record one transaction.

    Raises:
        InvalidTransactionType, MissingReference: before any store call
        Unauthenticated: no caller identity
        NotFound, Forbidden: referenced meter/bill absent or not the caller's
        StoreError: the transaction insert failed
    """
    transaction_type = parse_transaction_type(request.transaction_type)
    _validate_references(transaction_type, request)

    caller = resolve_caller(store)

    bill = None
    if request.meter_id:
        get_owned_meter(
            store, caller, request.meter_id,
            "You do not have permission to perform transactions for this meter",
        )
    if request.bill_id:
        bill = get_owned_bill(store, caller, request.bill_id, "You do not have permission to pay this bill")

    number = transaction_number()
    status = TransactionStatus.COMPLETED if settings.SIMULATE_PAYMENT_CAPTURE else TransactionStatus.PENDING

    transaction = store.insert_transaction({
        "transaction_number": number,
        "user_id": caller.id,
        "meter_id": request.meter_id,
        "bill_id": request.bill_id,
        "transaction_type": transaction_type.value,
        "amount": request.amount,
        "payment_method": request.payment_method,
        "payment_reference": request.payment_reference,
        "status": status.value,
        "transaction_date": utcnow(),
        "notes": request.notes,
    })
    logger.info(f"Recorded {transaction_type.value} {number} ({status.value}) for user {caller.id}")

    notification_meter_id = request.meter_id or (bill["meter_id"] if bill else None)
    label = "Successful" if status == TransactionStatus.COMPLETED else "Pending"
    try:
        store.insert_notification({
            "user_id": caller.id,
            "meter_id": notification_meter_id,
            "title": f"{transaction_type.value.capitalize()} {label}",
            "message": _notification_message(transaction_type, request.amount, number, status, bill),
            "notification_type": NotificationType.INFO.value,
        })
    except StoreError as e:
        logger.error(f"Transaction {number} recorded but notification failed: {e.message}")

    return transaction
