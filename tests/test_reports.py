from datetime import datetime

from tests.conftest import ADMIN_ID, OTHER_ID, OWNER_ID, auth_headers
from utility_billing.models import Report
from utility_billing.services.report_service import daily_consumption


def report(client, report_type, parameters, user_id=OWNER_ID, **extra):
    body = {"report_type": report_type, "parameters": parameters, **extra}
    return client.post("/api/generate-reports", json=body, headers=auth_headers(user_id))


def test_daily_consumption_keeps_every_consecutive_pair():
    readings = [
        {"reading": 100, "reading_date": "2024-01-01T08:00:00"},
        {"reading": 104, "reading_date": "2024-01-02T08:00:00"},
        {"reading": 107, "reading_date": "2024-01-02T20:00:00"},
        {"reading": 110, "reading_date": "2024-01-03T08:00:00"},
    ]

    assert daily_consumption(readings) == [
        {"date": "2024-01-02", "consumption": 4, "reading": 104, "previous_reading": 100},
        {"date": "2024-01-02", "consumption": 3, "reading": 107, "previous_reading": 104},
        {"date": "2024-01-03", "consumption": 3, "reading": 110, "previous_reading": 107},
    ]


def test_consumption_average_is_per_reading_interval(client, factory):
    meter = factory.meter()
    factory.reading(meter, 100, datetime(2024, 1, 1, 8, 0))
    factory.reading(meter, 104, datetime(2024, 1, 2, 8, 0))
    factory.reading(meter, 107, datetime(2024, 1, 2, 20, 0))
    factory.reading(meter, 110, datetime(2024, 1, 3, 8, 0))

    body = report(client, "consumption", {
        "meter_id": meter.id,
        "start_date": "2024-01-01",
        "end_date": "2024-01-03",
    }).json()["report"]

    assert len(body["daily_consumption"]) == 3
    assert body["total_consumption"] == 10
    assert body["average_daily_consumption"] == round(10 / 3, 4)


def test_daily_consumption_of_single_reading_is_empty():
    assert daily_consumption([{"reading": 5, "reading_date": "2024-01-01T00:00:00"}]) == []


# ==================== Consumption ====================


def test_consumption_report(client, factory, db):
    meter = factory.meter()
    for day, value in ((1, 100), (2, 110), (3, 125), (4, 130)):
        factory.reading(meter, value, datetime(2024, 1, day, 9, 0))

    response = report(client, "consumption", {
        "meter_id": meter.id,
        "start_date": "2024-01-01",
        "end_date": "2024-01-04",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "consumption report generated successfully"
    body = data["report"]
    assert body["meter"]["id"] == meter.id
    assert body["readings"] == 4
    assert [d["consumption"] for d in body["daily_consumption"]] == [10, 15, 5]
    assert [d["date"] for d in body["daily_consumption"]] == ["2024-01-02", "2024-01-03", "2024-01-04"]
    assert body["total_consumption"] == 30
    assert body["average_daily_consumption"] == 10
    assert data["report_id"] == db.query(Report).one().id


def test_consumption_report_without_readings(client, factory):
    meter = factory.meter()

    body = report(client, "consumption", {
        "meter_id": meter.id,
        "start_date": "2024-01-01",
        "end_date": "2024-01-31",
    }).json()["report"]

    assert body["daily_consumption"] == []
    assert body["total_consumption"] == 0
    assert body["average_daily_consumption"] == 0


def test_consumption_report_for_other_users_meter_is_forbidden(client, factory, db):
    meter = factory.meter(user_id=OTHER_ID)

    response = report(client, "consumption", {
        "meter_id": meter.id,
        "start_date": "2024-01-01",
        "end_date": "2024-01-31",
    })

    assert response.status_code == 403
    assert db.query(Report).count() == 0


def test_admin_consumption_report_for_any_meter(client, factory, admin):
    meter = factory.meter(user_id=OTHER_ID)

    response = report(client, "consumption", {
        "meter_id": meter.id,
        "start_date": "2024-01-01",
        "end_date": "2024-01-31",
    }, user_id=ADMIN_ID)

    assert response.status_code == 200


def test_consumption_report_missing_parameters(client):
    response = report(client, "consumption", {"start_date": "2024-01-01"})

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "MissingParameters"
    assert "meter_id" in data["error"]
    assert "end_date" in data["error"]


# ==================== Billing ====================


def _billing_fixture(factory):
    meter = factory.meter()
    january = factory.bill(meter, total_amount=420.0)
    february = factory.bill(meter, total_amount=210.0, start=datetime(2024, 2, 1), end=datetime(2024, 2, 29))
    factory.transaction(OWNER_ID, 420.0, bill=january, status="completed")
    factory.transaction(OWNER_ID, 100.0, bill=february, status="pending")

    other_meter = factory.meter(user_id=OTHER_ID)
    factory.bill(other_meter, total_amount=999.0)
    return meter


BILLING_PARAMS = {"billing_period_start": "2024-01-01", "billing_period_end": "2024-02-29"}


def test_billing_report_totals(client, factory):
    _billing_fixture(factory)

    body = report(client, "billing", BILLING_PARAMS).json()["report"]

    assert len(body["bills"]) == 2
    assert len(body["transactions"]) == 2
    assert body["total_billed"] == 630.0
    assert body["total_paid"] == 420.0
    assert body["total_outstanding"] == 210.0
    assert all(bill["meters"]["user_id"] == OWNER_ID for bill in body["bills"])


def test_billing_report_is_stable_across_requests(client, factory):
    _billing_fixture(factory)

    first = report(client, "billing", BILLING_PARAMS).json()["report"]
    second = report(client, "billing", BILLING_PARAMS).json()["report"]

    for key in ("total_billed", "total_paid", "total_outstanding"):
        assert first[key] == second[key]


def test_billing_report_includes_overlapping_bills(client, factory):
    _billing_fixture(factory)

    body = report(client, "billing", {
        "billing_period_start": "2024-01-15",
        "billing_period_end": "2024-01-20",
    }).json()["report"]

    assert body["total_billed"] == 420.0


def test_billing_report_for_other_user_requires_admin(client, factory, db):
    _billing_fixture(factory)

    response = report(client, "billing", {**BILLING_PARAMS, "user_id": OTHER_ID})

    assert response.status_code == 403
    assert db.query(Report).count() == 0


def test_admin_billing_report_for_other_user(client, factory, admin):
    _billing_fixture(factory)

    body = report(client, "billing", {**BILLING_PARAMS, "user_id": OTHER_ID}, user_id=ADMIN_ID).json()["report"]

    assert body["user_id"] == OTHER_ID
    assert body["total_billed"] == 999.0
    assert body["total_paid"] == 0


# ==================== Transactions ====================


def _transactions_fixture(factory):
    meter = factory.meter(billing_type="prepaid")
    factory.transaction(OWNER_ID, 500, transaction_type="recharge", meter=meter)
    factory.transaction(OWNER_ID, 250, transaction_type="recharge", meter=meter)
    factory.transaction(OWNER_ID, 75, transaction_type="recharge", meter=meter, status="failed")
    factory.transaction(OWNER_ID, 40, transaction_type="refund")
    factory.transaction(OWNER_ID, 999, transaction_type="payment", when=datetime(2023, 12, 1))
    factory.transaction(OTHER_ID, 300, transaction_type="recharge")


TX_PARAMS = {"start_date": "2024-01-01", "end_date": "2024-01-31"}


def test_transactions_report_totals(client, factory):
    _transactions_fixture(factory)

    body = report(client, "transactions", TX_PARAMS).json()["report"]

    assert body["count"] == 4
    assert body["totals"] == {"recharge": 750.0, "payment": 0.0, "refund": 40.0}
    recharge = next(t for t in body["transactions"] if t["transaction_type"] == "recharge")
    assert recharge["meters"]["meter_type"] == "electricity"


def test_transactions_report_filtered_by_type(client, factory):
    _transactions_fixture(factory)

    body = report(client, "transactions", {**TX_PARAMS, "transaction_type": "refund"}).json()["report"]

    assert body["count"] == 1
    assert body["totals"]["refund"] == 40.0
    assert body["totals"]["recharge"] == 0


def test_transactions_report_unknown_type_filter(client):
    response = report(client, "transactions", {**TX_PARAMS, "transaction_type": "gift"})

    assert response.status_code == 400
    assert response.json()["code"] == "InvalidTransactionType"


# ==================== Envelope ====================


def test_unsupported_report_type(client):
    response = report(client, "forecast", {})

    assert response.status_code == 400
    assert response.json()["code"] == "UnsupportedReportType"
    assert response.json()["error"] == "Unsupported report type: forecast"


def test_parameters_are_required(client):
    response = client.post(
        "/api/generate-reports",
        json={"report_type": "billing"},
        headers=auth_headers(OWNER_ID),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "MissingParameters"
    assert "parameters" in response.json()["error"]


def test_report_requires_authentication(client):
    response = client.post("/api/generate-reports", json={"report_type": "transactions", "parameters": TX_PARAMS})

    assert response.status_code == 401


def test_every_report_is_recorded(client, factory, db):
    _transactions_fixture(factory)

    first = report(client, "transactions", TX_PARAMS, send_email=True).json()
    second = report(client, "transactions", TX_PARAMS).json()

    assert first["report_id"] != second["report_id"]
    records = db.query(Report).all()
    assert len(records) == 2
    assert all(r.user_id == OWNER_ID and r.report_type == "transactions" for r in records)
    assert records[0].parameters == TX_PARAMS
