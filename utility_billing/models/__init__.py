from utility_billing.models.user import Profile, UserRole
from utility_billing.models.meter import Meter, MeterReading, MeterType, BillingType, MeterStatus
from utility_billing.models.billing import (
    Bill,
    BillStatus,
    Notification,
    NotificationType,
    Report,
    ReportType,
    Transaction,
    TransactionStatus,
    TransactionType,
)

__all__ = [
    "Profile",
    "UserRole",
    "Meter",
    "MeterReading",
    "MeterType",
    "BillingType",
    "MeterStatus",
    "Bill",
    "BillStatus",
    "Notification",
    "NotificationType",
    "Report",
    "ReportType",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
]
