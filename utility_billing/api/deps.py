"""
Request-scoped dependencies
"""
from typing import Iterator, Optional

from fastapi import Request

from utility_billing.core.config import settings
from utility_billing.database import SessionLocal
from utility_billing.services.store import BillingStore
from utility_billing.services.sql_store import SqlStore
from utility_billing.services.supabase_service import SupabaseStore


def bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """Token from an "Authorization: Bearer <token>" header"""
    if not auth_header:
        return None
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_store(request: Request) -> Iterator[BillingStore]:
    """Data store bound to the caller's credential for this request only"""
    token = bearer_token(request.headers.get("Authorization"))

    if settings.uses_supabase:
        yield SupabaseStore(token)
        return

    db = SessionLocal()
    try:
        yield SqlStore(db, token)
    finally:
        db.close()
