"""
Billing Models
Bills for postpaid meters, money movements, and user notifications
"""
from datetime import date, datetime, timezone
from enum import Enum
import uuid

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from utility_billing.db.base import Base, TimestampMixin


class BillStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class TransactionType(str, Enum):
    RECHARGE = "recharge"
    PAYMENT = "payment"
    REFUND = "refund"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class NotificationType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ALERT = "alert"


class ReportType(str, Enum):
    CONSUMPTION = "consumption"
    BILLING = "billing"
    TRANSACTIONS = "transactions"


class Bill(Base, TimestampMixin):
    """Invoice for a postpaid meter over one billing period"""
    __tablename__ = "bills"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    meter_id: Mapped[str] = mapped_column(String(36), ForeignKey("meters.id"), nullable=False, index=True)
    bill_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    billing_period_start: Mapped[date] = mapped_column(Date, nullable=False)
    billing_period_end: Mapped[date] = mapped_column(Date, nullable=False)
    previous_reading: Mapped[float] = mapped_column(Float, nullable=False)
    current_reading: Mapped[float] = mapped_column(Float, nullable=False)
    consumption: Mapped[float] = mapped_column(Float, nullable=False)
    rate: Mapped[float] = mapped_column(Float, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    tax_amount: Mapped[float] = mapped_column(Float, nullable=False)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)

    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=BillStatus.PENDING.value, nullable=False)

    meter = relationship("Meter", back_populates="bills")
    transactions = relationship("Transaction", back_populates="bill")


class Transaction(Base):
    """Recorded movement of funds; never mutated after creation"""
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    transaction_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    meter_id: Mapped[str] = mapped_column(String(36), ForeignKey("meters.id"), nullable=True)
    bill_id: Mapped[str] = mapped_column(String(36), ForeignKey("bills.id"), nullable=True, index=True)

    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_reference: Mapped[str] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=TransactionStatus.PENDING.value, nullable=False)
    transaction_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    bill = relationship("Bill", back_populates="transactions")


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    meter_id: Mapped[str] = mapped_column(String(36), ForeignKey("meters.id"), nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    notification_type: Mapped[str] = mapped_column(String(20), default=NotificationType.INFO.value, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )


class Report(Base):
    """Audit row written every time a report is assembled"""
    __tablename__ = "reports"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    report_type: Mapped[str] = mapped_column(String(20), nullable=False)
    parameters: Mapped[dict] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
