import pytest

from utility_billing.core.config import settings

ENDPOINTS = [
    "/api/generate-bills",
    "/api/process-payment",
    "/api/generate-reports",
    "/api/process-meter-readings",
]


@pytest.mark.parametrize("path", ENDPOINTS)
def test_preflight_answered_with_cors_headers(client, path):
    response = client.options(path)

    assert response.status_code == 200
    assert response.text == "ok"
    assert response.headers["access-control-allow-origin"] == "*"
    assert "authorization" in response.headers["access-control-allow-headers"]
    assert "apikey" in response.headers["access-control-allow-headers"]


def test_browser_preflight(client):
    response = client.options(
        "/api/process-payment",
        headers={
            "Origin": "https://dashboard.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )

    assert response.status_code == 200
    assert response.text == "ok"


@pytest.mark.parametrize("path", ENDPOINTS)
def test_wrong_method(client, path):
    response = client.get(path)

    assert response.status_code == 405
    assert response.json() == {"success": False, "error": "Method not allowed", "code": "MethodNotAllowed"}


def test_unknown_path(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["code"] == "NotFound"


def test_malformed_json(client):
    response = client.post(
        "/api/generate-bills",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "InvalidRequest"


def test_root(client):
    data = client.get("/").json()

    assert data["success"] is True
    assert data["version"] == settings.VERSION


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] in ("healthy", "degraded")


def test_version(client):
    data = client.get("/api/version").json()

    assert data["api_version"] == settings.VERSION
    assert data["data_backend"] == "sql"
