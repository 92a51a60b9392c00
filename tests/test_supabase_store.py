from datetime import date, datetime
from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from utility_billing.core.exceptions import StoreError
from utility_billing.services.supabase_service import SupabaseStore


def make_client(data=None):
    """Supabase client whose query builder chains back to itself"""
    query = MagicMock()
    for method in ("select", "insert", "eq", "in_", "gte", "lte", "order", "limit"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=data)

    client = MagicMock()
    client.table.return_value = query
    return client, query


def test_get_meter_returns_first_row():
    client, query = make_client([{"id": "m1", "user_id": "u1"}])
    store = SupabaseStore("token", client=client)

    assert store.get_meter("m1") == {"id": "m1", "user_id": "u1"}
    client.table.assert_called_with("meters")
    query.eq.assert_called_with("id", "m1")
    query.limit.assert_called_with(1)


def test_missing_row_is_none():
    client, _ = make_client([])

    assert SupabaseStore("token", client=client).get_bill("b1") is None


def test_get_meters_filters_billing_type():
    client, query = make_client([{"id": "m1"}])

    rows = SupabaseStore("token", client=client).get_meters(["m1", "m2"], "postpaid")

    assert rows == [{"id": "m1"}]
    query.in_.assert_called_with("id", ["m1", "m2"])
    query.eq.assert_called_with("billing_type", "postpaid")


def test_insert_sends_iso_dates():
    client, query = make_client([{"id": "b1"}])

    row = SupabaseStore("token", client=client).insert_bill({
        "billing_period_start": date(2024, 1, 1),
        "created_at": datetime(2024, 1, 31, 12, 0),
        "amount": 400.0,
    })

    assert row == {"id": "b1"}
    query.insert.assert_called_with({
        "billing_period_start": "2024-01-01",
        "created_at": "2024-01-31T12:00:00",
        "amount": 400.0,
    })


def test_insert_without_returned_row_fails():
    client, _ = make_client([])

    with pytest.raises(StoreError) as exc:
        SupabaseStore("token", client=client).insert_report({"report_type": "billing"})

    assert exc.value.message == "Failed to record report"


def test_api_error_becomes_store_error():
    client, query = make_client()
    query.execute.side_effect = APIError({"message": "permission denied", "code": "42501"})

    with pytest.raises(StoreError) as exc:
        SupabaseStore("token", client=client).insert_transaction({"amount": 1})

    assert exc.value.status_code == 500
    assert exc.value.message == "Failed to create transaction"
    assert exc.value.details["message"] == "permission denied"


def test_network_error_becomes_store_error():
    client, query = make_client()
    query.execute.side_effect = httpx.ConnectError("connection refused")

    with pytest.raises(StoreError):
        SupabaseStore("token", client=client).get_readings("m1", datetime(2024, 1, 1), datetime(2024, 1, 31))


def test_transactions_for_no_bills_skips_query():
    client, _ = make_client()

    assert SupabaseStore("token", client=client).get_transactions_for_bills([]) == []
    client.table.assert_not_called()


def test_get_user_from_auth():
    client, _ = make_client()
    client.auth.get_user.return_value = MagicMock(user=MagicMock(id="u1", email="a@example.com"))

    assert SupabaseStore("token", client=client).get_user() == {"id": "u1", "email": "a@example.com"}
    client.auth.get_user.assert_called_with("token")


def test_rejected_token_has_no_user():
    client, _ = make_client()
    client.auth.get_user.side_effect = Exception("invalid JWT")

    assert SupabaseStore("token", client=client).get_user() is None


def test_no_token_has_no_user():
    client, _ = make_client()

    assert SupabaseStore(None, client=client).get_user() is None
    client.auth.get_user.assert_not_called()
