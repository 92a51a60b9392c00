"""
SQLAlchemy-backed data store

Serves the same schema as the Supabase project straight from Postgres (or
SQLite in tests). Identity comes from verifying the Supabase-issued JWT
locally with the project's JWT secret.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional, Sequence, Type

from jose import JWTError, jwt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from utility_billing.core.config import settings
from utility_billing.core.dates import to_naive_utc
from utility_billing.core.exceptions import StoreError
from utility_billing.db.base import Base
from utility_billing.models import Bill, Meter, MeterReading, Notification, Profile, Report, Transaction
from utility_billing.services.store import BillingStore, Row

logger = logging.getLogger(__name__)


def _meter_summary(meter: Meter) -> Row:
    return {
        "meter_number": meter.meter_number,
        "meter_type": meter.meter_type,
        "user_id": meter.user_id,
        "premises_id": meter.premises_id,
        "tariff_rate": meter.tariff_rate,
    }


class SqlStore(BillingStore):
    """BillingStore over a SQLAlchemy session"""

    def __init__(self, db: Session, access_token: Optional[str] = None):
        super().__init__(access_token)
        self.db = db

    @contextmanager
    def _guard(self, operation: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while trying to {operation}: {e}")
            raise StoreError(operation, str(e.__cause__ or e))

    def _insert(self, model: Type[Base], row: Row, operation: str) -> Row:
        values = {
            key: to_naive_utc(value) if isinstance(value, datetime) else value
            for key, value in row.items()
        }
        with self._guard(operation):
            record = model(**values)
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
            return record.to_dict()

    # ==================== Identity ====================

    def get_user(self) -> Optional[Row]:
        if not self.access_token:
            return None
        try:
            payload = jwt.decode(
                self.access_token,
                settings.SUPABASE_JWT_SECRET,
                algorithms=[settings.JWT_ALGORITHM],
                audience=settings.JWT_AUDIENCE,
            )
        except JWTError as e:
            logger.warning(f"JWT decode error: {e}")
            return None

        user_id = payload.get("sub")
        if not user_id:
            logger.warning("Token missing 'sub' field")
            return None
        return {"id": str(user_id), "email": payload.get("email")}

    def get_profile(self, user_id: str) -> Optional[Row]:
        with self._guard("fetch profile"):
            profile = self.db.query(Profile).filter(Profile.id == user_id).first()
        return profile.to_dict() if profile else None

    # ==================== Meters & Readings ====================

    def get_meter(self, meter_id: str) -> Optional[Row]:
        with self._guard("fetch meter"):
            meter = self.db.query(Meter).filter(Meter.id == meter_id).first()
        return meter.to_dict() if meter else None

    def get_meters(self, meter_ids: Sequence[str], billing_type: Optional[str] = None) -> List[Row]:
        with self._guard("fetch meters"):
            query = self.db.query(Meter).filter(Meter.id.in_(list(meter_ids)))
            if billing_type:
                query = query.filter(Meter.billing_type == billing_type)
            return [meter.to_dict() for meter in query.all()]

    def get_readings(self, meter_id: str, start: datetime, end: datetime) -> List[Row]:
        with self._guard("fetch readings"):
            readings = (
                self.db.query(MeterReading)
                .filter(
                    MeterReading.meter_id == meter_id,
                    MeterReading.reading_date >= to_naive_utc(start),
                    MeterReading.reading_date <= to_naive_utc(end),
                )
                .order_by(MeterReading.reading_date.asc(), MeterReading.created_at.asc())
                .all()
            )
        return [reading.to_dict() for reading in readings]

    def insert_reading(self, row: Row) -> Row:
        return self._insert(MeterReading, row, "process meter reading")

    # ==================== Bills ====================

    def get_bill(self, bill_id: str) -> Optional[Row]:
        with self._guard("fetch bill"):
            bill = self.db.query(Bill).filter(Bill.id == bill_id).first()
        return bill.to_dict() if bill else None

    def get_bills(self, user_id: str, start: datetime, end: datetime) -> List[Row]:
        with self._guard("fetch bills"):
            rows = (
                self.db.query(Bill, Meter)
                .join(Meter, Bill.meter_id == Meter.id)
                .filter(
                    Meter.user_id == user_id,
                    Bill.billing_period_start <= end.date(),
                    Bill.billing_period_end >= start.date(),
                )
                .order_by(Bill.created_at.desc())
                .all()
            )
        return [{**bill.to_dict(), "meters": _meter_summary(meter)} for bill, meter in rows]

    def insert_bill(self, row: Row) -> Row:
        return self._insert(Bill, row, "create bill")

    # ==================== Transactions ====================

    def get_transactions_for_bills(self, bill_ids: Sequence[str]) -> List[Row]:
        if not bill_ids:
            return []
        with self._guard("fetch transactions"):
            transactions = (
                self.db.query(Transaction)
                .filter(Transaction.bill_id.in_(list(bill_ids)))
                .order_by(Transaction.transaction_date.desc())
                .all()
            )
        return [transaction.to_dict() for transaction in transactions]

    def get_transactions(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        transaction_type: Optional[str] = None,
    ) -> List[Row]:
        with self._guard("fetch transactions"):
            query = (
                self.db.query(Transaction, Meter, Bill)
                .outerjoin(Meter, Transaction.meter_id == Meter.id)
                .outerjoin(Bill, Transaction.bill_id == Bill.id)
                .filter(
                    Transaction.user_id == user_id,
                    Transaction.transaction_date >= to_naive_utc(start),
                    Transaction.transaction_date <= to_naive_utc(end),
                )
            )
            if transaction_type:
                query = query.filter(Transaction.transaction_type == transaction_type)
            rows = query.order_by(Transaction.transaction_date.desc()).all()

        return [
            {
                **transaction.to_dict(),
                "meters": {"meter_number": meter.meter_number, "meter_type": meter.meter_type} if meter else None,
                "bills": {"bill_number": bill.bill_number} if bill else None,
            }
            for transaction, meter, bill in rows
        ]

    def insert_transaction(self, row: Row) -> Row:
        return self._insert(Transaction, row, "create transaction")

    # ==================== Side effects ====================

    def insert_notification(self, row: Row) -> Row:
        return self._insert(Notification, row, "create notification")

    def insert_report(self, row: Row) -> Row:
        return self._insert(Report, row, "record report")
