"""
Supabase-backed data store

Each instance wraps a supabase-py client that carries the caller's bearer
token, so PostgREST evaluates row-level security as that caller.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client
from supabase.client import ClientOptions

from utility_billing.core.config import settings
from utility_billing.core.exceptions import InternalError, StoreError
from utility_billing.services.store import BillingStore, Row

logger = logging.getLogger(__name__)

METER_SUMMARY = "meter_number, meter_type, user_id, premises_id, tariff_rate"


def _jsonable(row: Dict[str, Any]) -> Dict[str, Any]:
    """PostgREST takes JSON; dates go over the wire as ISO strings"""
    return {
        key: value.isoformat() if isinstance(value, (datetime, date)) else value
        for key, value in row.items()
    }


class SupabaseStore(BillingStore):
    """BillingStore over the Supabase REST API"""

    def __init__(self, access_token: Optional[str] = None, client: Optional[Client] = None):
        super().__init__(access_token)
        self.client = client or self._create_client(access_token)

    @staticmethod
    def _create_client(access_token: Optional[str]) -> Client:
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        try:
            client = create_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_KEY,
                options=ClientOptions(headers=headers),
            )
        except Exception as e:
            logger.error(f"Failed to initialize Supabase client: {e}")
            raise InternalError("Data store is not configured", str(e))

        if access_token:
            client.postgrest.auth(access_token)
        return client

    # ==================== Query helpers ====================

    def _execute(self, query, operation: str) -> List[Row]:
        try:
            response = query.execute()
        except APIError as e:
            logger.error(f"Supabase error while trying to {operation}: {e}")
            raise StoreError(operation, e.json())
        except httpx.HTTPError as e:
            logger.error(f"Supabase unreachable while trying to {operation}: {e}")
            raise StoreError(operation, str(e))
        return response.data or []

    def _first(self, query, operation: str) -> Optional[Row]:
        rows = self._execute(query.limit(1), operation)
        return rows[0] if rows else None

    def _insert(self, table: str, row: Row, operation: str) -> Row:
        rows = self._execute(self.client.table(table).insert(_jsonable(row)), operation)
        if not rows:
            raise StoreError(operation, "insert returned no row")
        return rows[0]

    # ==================== Identity ====================

    def get_user(self) -> Optional[Row]:
        if not self.access_token:
            return None
        try:
            response = self.client.auth.get_user(self.access_token)
        except Exception as e:
            logger.warning(f"Token verification failed: {e}")
            return None

        user = getattr(response, "user", None)
        if user is None:
            return None
        return {"id": str(user.id), "email": user.email}

    def get_profile(self, user_id: str) -> Optional[Row]:
        return self._first(
            self.client.table("profiles").select("*").eq("id", user_id),
            "fetch profile",
        )

    # ==================== Meters & Readings ====================

    def get_meter(self, meter_id: str) -> Optional[Row]:
        return self._first(
            self.client.table("meters").select("*").eq("id", meter_id),
            "fetch meter",
        )

    def get_meters(self, meter_ids: Sequence[str], billing_type: Optional[str] = None) -> List[Row]:
        query = self.client.table("meters").select("*").in_("id", list(meter_ids))
        if billing_type:
            query = query.eq("billing_type", billing_type)
        return self._execute(query, "fetch meters")

    def get_readings(self, meter_id: str, start: datetime, end: datetime) -> List[Row]:
        query = (
            self.client.table("meter_readings")
            .select("*")
            .eq("meter_id", meter_id)
            .gte("reading_date", start.isoformat())
            .lte("reading_date", end.isoformat())
            .order("reading_date", desc=False)
        )
        return self._execute(query, "fetch readings")

    def insert_reading(self, row: Row) -> Row:
        return self._insert("meter_readings", row, "process meter reading")

    # ==================== Bills ====================

    def get_bill(self, bill_id: str) -> Optional[Row]:
        return self._first(
            self.client.table("bills").select("*").eq("id", bill_id),
            "fetch bill",
        )

    def get_bills(self, user_id: str, start: datetime, end: datetime) -> List[Row]:
        query = (
            self.client.table("bills")
            .select(f"*, meters!inner({METER_SUMMARY})")
            .eq("meters.user_id", user_id)
            .lte("billing_period_start", end.date().isoformat())
            .gte("billing_period_end", start.date().isoformat())
            .order("created_at", desc=True)
        )
        return self._execute(query, "fetch bills")

    def insert_bill(self, row: Row) -> Row:
        return self._insert("bills", row, "create bill")

    # ==================== Transactions ====================

    def get_transactions_for_bills(self, bill_ids: Sequence[str]) -> List[Row]:
        if not bill_ids:
            return []
        query = (
            self.client.table("transactions")
            .select("*")
            .in_("bill_id", list(bill_ids))
            .order("transaction_date", desc=True)
        )
        return self._execute(query, "fetch transactions")

    def get_transactions(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        transaction_type: Optional[str] = None,
    ) -> List[Row]:
        query = (
            self.client.table("transactions")
            .select("*, meters:meter_id(meter_number, meter_type), bills:bill_id(bill_number)")
            .eq("user_id", user_id)
            .gte("transaction_date", start.isoformat())
            .lte("transaction_date", end.isoformat())
        )
        if transaction_type:
            query = query.eq("transaction_type", transaction_type)
        return self._execute(query.order("transaction_date", desc=True), "fetch transactions")

    def insert_transaction(self, row: Row) -> Row:
        return self._insert("transactions", row, "create transaction")

    # ==================== Side effects ====================

    def insert_notification(self, row: Row) -> Row:
        return self._insert("notifications", row, "create notification")

    def insert_report(self, row: Row) -> Row:
        return self._insert("reports", row, "record report")
