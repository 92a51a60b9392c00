"""
Caller identity and resource access

One predicate, can_access, decides every ownership question the handlers
ask: the caller owns the resource, or the caller is an administrator.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from utility_billing.core.exceptions import Forbidden, NotFound, Unauthenticated
from utility_billing.models.user import UserRole
from utility_billing.services.store import BillingStore, Row

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    id: str
    email: Optional[str] = None
    role: str = UserRole.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def resolve_caller(store: BillingStore) -> Caller:
    """
    Resolve who is calling from the credential the store was built with.

    Raises:
        Unauthenticated: no valid identity behind the credential
    """
    user = store.get_user()
    if not user or not user.get("id"):
        raise Unauthenticated("Authentication required")

    # A missing profile means an ordinary user
    profile = store.get_profile(user["id"]) or {}
    role = profile.get("role") or UserRole.USER.value
    return Caller(id=user["id"], email=user.get("email"), role=role)


def can_access(caller: Caller, owner_id: Optional[str]) -> bool:
    return caller.is_admin or (owner_id is not None and str(owner_id) == caller.id)


def ensure_access(caller: Caller, owner_id: Optional[str], message: str) -> None:
    if not can_access(caller, owner_id):
        logger.warning(f"Access denied for user {caller.id}: {message}")
        raise Forbidden(message)


def get_owned_meter(store: BillingStore, caller: Caller, meter_id: str, message: str) -> Row:
    """Fetch a meter the caller may act on (404 if absent, 403 if not theirs)"""
    meter = store.get_meter(meter_id)
    if not meter:
        raise NotFound("Meter not found")
    ensure_access(caller, meter.get("user_id"), message)
    return meter


def get_owned_bill(store: BillingStore, caller: Caller, bill_id: str, message: str) -> Row:
    """Fetch a bill the caller may act on; ownership follows the bill's meter.

    The bill's meter is attached under "meter".
    """
    bill = store.get_bill(bill_id)
    if not bill:
        raise NotFound("Bill not found")
    meter = store.get_meter(bill["meter_id"]) or {}
    ensure_access(caller, meter.get("user_id"), message)
    return {**bill, "meter": meter}


def resolve_target_user(caller: Caller, requested_user_id: Optional[str]) -> str:
    """Whose data a report covers: the caller, or anyone for an administrator"""
    if not requested_user_id or str(requested_user_id) == caller.id:
        return caller.id
    if not caller.is_admin:
        raise Forbidden("You do not have access to another user's data")
    return str(requested_user_id)
