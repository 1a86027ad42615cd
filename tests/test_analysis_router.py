"""
Tests for POST /api/analyze
"""

import uuid
import pytest

from agrosat.api.main import app
from agrosat.api.dependencies import get_orchestrator

from conftest import make_orchestrator


@pytest.fixture
def orchestrated(auth_client):
    app.dependency_overrides[get_orchestrator] = lambda: make_orchestrator()
    return auth_client


class TestAnalyzeAuth:

    def test_requires_auth(self, client):
        app.dependency_overrides[get_orchestrator] = lambda: make_orchestrator()
        response = client.post("/api/analyze", json={"field_id": str(uuid.uuid4()), "lat": 1, "lon": 1})
        assert response.status_code == 401
        assert response.json()["success"] is False
        assert response.json()["error"] == "Unauthorized: No token"
        assert response.headers["WWW-Authenticate"] == "Bearer"


class TestAnalyze:

    def test_success(self, orchestrated, store, field):
        response = orchestrated.post(
            "/api/analyze",
            json={"field_id": str(field.id), "lat": 55.75, "lon": 37.61}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["analysis_id"] == str(store.analyses[0].id)
        assert 0.58 <= data["ndvi_average"] <= 0.78
        assert data["seasonal_norm"] == 0.8
        assert data["weather"]["condition"] == "Clear"
        assert data["ai_insight"]["status_title"] == "Анализ завершен"
        assert isinstance(data["stress_cause"], str)
        assert "X-Process-Time" in response.headers

    def test_each_request_creates_a_record(self, orchestrated, store, field):
        body = {"field_id": str(field.id), "lat": 55.75, "lon": 37.61}

        first = orchestrated.post("/api/analyze", json=body)
        second = orchestrated.post("/api/analyze", json=body)

        assert first.status_code == second.status_code == 200
        assert first.json()["analysis_id"] != second.json()["analysis_id"]
        assert len(store.analyses) == 2

    def test_missing_coordinates(self, orchestrated, store, field):
        response = orchestrated.post("/api/analyze", json={"field_id": str(field.id)})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert "Latitude and Longitude" in data["error"]
        assert store.analyses == []

    def test_out_of_range_coordinates(self, orchestrated, field):
        response = orchestrated.post(
            "/api/analyze",
            json={"field_id": str(field.id), "lat": 95, "lon": 37.61}
        )
        assert response.status_code == 400

    def test_zero_coordinates(self, orchestrated, field):
        response = orchestrated.post("/api/analyze", json={"field_id": str(field.id), "lat": 0, "lon": 0})
        assert response.status_code == 200

    def test_unknown_field(self, orchestrated):
        response = orchestrated.post(
            "/api/analyze",
            json={"field_id": str(uuid.uuid4()), "lat": 55.75, "lon": 37.61}
        )

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_persistence_failure(self, orchestrated, store, field):
        store.fail_add_analysis = True

        response = orchestrated.post(
            "/api/analyze",
            json={"field_id": str(field.id), "lat": 55.75, "lon": 37.61}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "insert into analyses failed", "success": False}

    def test_invalid_body(self, orchestrated):
        response = orchestrated.post("/api/analyze", json={"lat": "north", "lon": 37.61})

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "Invalid request"
        assert data["success"] is False

    def test_unhandled_error_keeps_error_shape(self, auth_client, field):
        def broken_orchestrator():
            raise RuntimeError("orchestrator unavailable")

        app.dependency_overrides[get_orchestrator] = broken_orchestrator

        response = auth_client.post(
            "/api/analyze",
            json={"field_id": str(field.id), "lat": 55.75, "lon": 37.61}
        )

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Internal server error"
        assert data["success"] is False
