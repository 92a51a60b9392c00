import os

# Settings are read once at import time
os.environ["DATA_BACKEND"] = "sql"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"

from datetime import datetime, timedelta, timezone
import uuid

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from utility_billing.api.deps import bearer_token, get_store
from utility_billing.db.base import Base
from utility_billing.main import app
from utility_billing.models import Bill, Meter, MeterReading, Profile, Transaction
from utility_billing.services.sql_store import SqlStore

TEST_DATABASE_URL = "sqlite://"
JWT_SECRET = "test-jwt-secret"

OWNER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_ID = "22222222-2222-4222-8222-222222222222"
ADMIN_ID = "33333333-3333-4333-8333-333333333333"


def make_token(user_id, secret=JWT_SECRET, audience="authenticated", expires_in=3600):
    payload = {
        "sub": user_id,
        "email": f"{user_id[:8]}@example.com",
        "aud": audience,
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(user_id):
    return {"Authorization": f"Bearer {make_token(user_id)}"}


class Factory:
    """Inserts rows straight into the test database"""

    def __init__(self, db):
        self.db = db
        self._meter_count = 0

    def _save(self, record):
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def profile(self, user_id, role="user"):
        return self._save(Profile(id=user_id, role=role, email=f"{user_id[:8]}@example.com"))

    def meter(self, user_id=OWNER_ID, billing_type="postpaid", tariff_rate=8.0, meter_type="electricity", **kwargs):
        self._meter_count += 1
        kwargs.setdefault("meter_number", f"MTR-{self._meter_count:03d}")
        return self._save(Meter(
            user_id=user_id,
            billing_type=billing_type,
            tariff_rate=tariff_rate,
            meter_type=meter_type,
            **kwargs,
        ))

    def reading(self, meter, value, when):
        return self._save(MeterReading(meter_id=meter.id, reading=value, reading_date=when))

    def bill(self, meter, total_amount, start=datetime(2024, 1, 1), end=datetime(2024, 1, 30), status="pending"):
        amount = round(total_amount / 1.05, 2)
        return self._save(Bill(
            meter_id=meter.id,
            bill_number=f"BILL-{meter.meter_number}-{uuid.uuid4().hex[:8]}",
            billing_period_start=start.date(),
            billing_period_end=end.date(),
            previous_reading=0,
            current_reading=0,
            consumption=0,
            rate=meter.tariff_rate,
            amount=amount,
            tax_amount=round(total_amount - amount, 2),
            total_amount=total_amount,
            due_date=(end + timedelta(days=15)).date(),
            status=status,
        ))

    def transaction(self, user_id, amount, transaction_type="payment", status="completed",
                    when=datetime(2024, 1, 15, 12, 0), bill=None, meter=None):
        return self._save(Transaction(
            transaction_number=f"TXN-{uuid.uuid4().hex[:12]}",
            user_id=user_id,
            bill_id=bill.id if bill else None,
            meter_id=meter.id if meter else None,
            transaction_type=transaction_type,
            amount=amount,
            payment_method="card",
            status=status,
            transaction_date=when,
        ))


@pytest.fixture
def engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def client(session_factory):
    def override_get_store(request: Request):
        session = session_factory()
        try:
            yield SqlStore(session, bearer_token(request.headers.get("Authorization")))
        finally:
            session.close()

    app.dependency_overrides[get_store] = override_get_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin(factory):
    return factory.profile(ADMIN_ID, role="admin")
