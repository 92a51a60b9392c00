"""
Meter Models
A meter is one utility connection; readings are its cumulative counter values.
"""
from datetime import datetime, timezone
from enum import Enum
import uuid

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from utility_billing.db.base import Base, TimestampMixin


class MeterType(str, Enum):
    ELECTRICITY = "electricity"
    WATER = "water"
    GAS = "gas"


class BillingType(str, Enum):
    """Balance deducted in advance vs. billed after consumption"""
    PREPAID = "prepaid"
    POSTPAID = "postpaid"


class MeterStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"


class Meter(Base, TimestampMixin):
    __tablename__ = "meters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    premises_id: Mapped[str] = mapped_column(String(36), nullable=True)
    meter_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    meter_type: Mapped[str] = mapped_column(String(20), default=MeterType.ELECTRICITY.value, nullable=False)
    billing_type: Mapped[str] = mapped_column(String(20), default=BillingType.POSTPAID.value, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), default=MeterStatus.ACTIVE.value, nullable=False)
    tariff_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # Prepaid only
    current_balance: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    threshold_limit: Mapped[float] = mapped_column(Float, nullable=True)

    readings = relationship("MeterReading", back_populates="meter")
    bills = relationship("Bill", back_populates="meter")


class MeterReading(Base):
    __tablename__ = "meter_readings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    meter_id: Mapped[str] = mapped_column(String(36), ForeignKey("meters.id"), nullable=False, index=True)
    reading: Mapped[float] = mapped_column(Float, nullable=False)
    reading_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    is_manual: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    consumption: Mapped[float] = mapped_column(Float, nullable=True)  # filled by the store's trigger
    notes: Mapped[str] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    meter = relationship("Meter", back_populates="readings")
