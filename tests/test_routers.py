"""Tests for the HTTP layer: auth guards, error mapping and serialization."""
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from jose import jwt

from conftest import NOW
from vendor_compliance.main import app
from vendor_compliance.models import AgingReport, AgingSummary, MonthlySubmissionEntry
from vendor_compliance.services.jwt_service import jwt_service
from vendor_compliance.services.report_service import report_service


@pytest.fixture
def client():
    # No context manager: the lifespan handler (Mongo connection) is not run
    yield TestClient(app)
    app.dependency_overrides.clear()


def _login_as(role: str):
    app.dependency_overrides[jwt_service.get_current_user] = lambda: {"sub": "u1", "role": role}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_aging_report_for_admin(client):
    _login_as("admin")
    report = AgingReport(generated_at=NOW, summary=AgingSummary(threshold_days=30), vendors=[])

    with patch.object(report_service, "get_aging_report", AsyncMock(return_value=report)):
        response = client.get("/reports/aging")

    assert response.status_code == 200
    assert response.json()["summary"]["threshold_days"] == 30


def test_reports_forbidden_for_vendor(client):
    _login_as("vendor")

    response = client.get("/reports/dashboard")

    assert response.status_code == 403


def test_consultant_can_read_vendor_agreement_but_not_reports(client):
    _login_as("consultant")

    with patch.object(report_service, "get_vendor_agreement", AsyncMock(side_effect=HTTPException(404, "Vendor not found"))):
        response = client.get("/vendors/v404/agreement")
    assert response.status_code == 404
    assert response.json()["detail"] == "Vendor not found"

    assert client.get("/reports/aging").status_code == 403


def test_unexpected_errors_become_500(client):
    _login_as("admin")

    with patch.object(report_service, "get_aging_report", AsyncMock(side_effect=RuntimeError("db down"))):
        response = client.get("/reports/aging")

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to generate aging report: db down"


def test_query_parameters_reach_the_service(client):
    _login_as("admin")
    trend = [MonthlySubmissionEntry(name="Apr 2025", count=3, month="Apr", year=2025)]

    with patch.object(report_service, "get_monthly_submissions", AsyncMock(return_value=trend)) as mock_trend:
        response = client.get("/reports/monthly-submissions", params={"year": 2025})

    mock_trend.assert_awaited_once_with(2025)
    assert response.json() == [{"name": "Apr 2025", "count": 3, "month": "Apr", "year": 2025}]


def test_invalid_query_parameter_returns_422(client):
    _login_as("admin")

    response = client.get("/reports/monthly-submissions", params={"year": "this-year"})

    assert response.status_code == 422
    assert response.json()["message"] == "Validation error - check request parameters"


def test_signed_token_is_accepted(client, monkeypatch):
    monkeypatch.setattr(jwt_service, "secret_key", "test-secret")
    token = jwt.encode({"sub": "u1", "role": "admin"}, "test-secret", algorithm="HS256")

    with patch.object(report_service, "get_monthly_submissions", AsyncMock(return_value=[])):
        response = client.get(
            "/reports/monthly-submissions", headers={"Authorization": f"Bearer {token}"}
        )

    assert response.status_code == 200
    assert response.json() == []


def test_token_signed_with_another_key_is_rejected(client, monkeypatch):
    monkeypatch.setattr(jwt_service, "secret_key", "test-secret")
    token = jwt.encode({"sub": "u1", "role": "admin"}, "other-secret", algorithm="HS256")

    response = client.get("/reports/aging", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_verify_token_without_configured_secret(monkeypatch):
    monkeypatch.setattr(jwt_service, "secret_key", None)
    assert jwt_service.verify_token("anything") is None
