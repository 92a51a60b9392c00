"""
Data access interface

Handlers never touch a module-level client. A BillingStore is built per
request around the caller's credential and passed into each service.
Rows go in and come out as plain dicts keyed by column name.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

Row = Dict[str, Any]


class BillingStore(ABC):
    """Read/write operations the billing, payment and report services need"""

    def __init__(self, access_token: Optional[str] = None):
        self.access_token = access_token

    # ==================== Identity ====================

    @abstractmethod
    def get_user(self) -> Optional[Row]:
        """Identity behind the forwarded credential, or None"""

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[Row]:
        ...

    # ==================== Meters & Readings ====================

    @abstractmethod
    def get_meter(self, meter_id: str) -> Optional[Row]:
        ...

    @abstractmethod
    def get_meters(self, meter_ids: Sequence[str], billing_type: Optional[str] = None) -> List[Row]:
        ...

    @abstractmethod
    def get_readings(self, meter_id: str, start: datetime, end: datetime) -> List[Row]:
        """Readings in [start, end], oldest first"""

    @abstractmethod
    def insert_reading(self, row: Row) -> Row:
        ...

    # ==================== Bills ====================

    @abstractmethod
    def get_bill(self, bill_id: str) -> Optional[Row]:
        ...

    @abstractmethod
    def get_bills(self, user_id: str, start: datetime, end: datetime) -> List[Row]:
        """Bills of the user's meters whose period overlaps [start, end], newest first.

        Each bill carries its meter summary under "meters".
        """

    @abstractmethod
    def insert_bill(self, row: Row) -> Row:
        ...

    # ==================== Transactions ====================

    @abstractmethod
    def get_transactions_for_bills(self, bill_ids: Sequence[str]) -> List[Row]:
        ...

    @abstractmethod
    def get_transactions(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        transaction_type: Optional[str] = None,
    ) -> List[Row]:
        ...

    @abstractmethod
    def insert_transaction(self, row: Row) -> Row:
        ...

    # ==================== Side effects ====================

    @abstractmethod
    def insert_notification(self, row: Row) -> Row:
        ...

    @abstractmethod
    def insert_report(self, row: Row) -> Row:
        ...
