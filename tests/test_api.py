"""Tests for the FastAPI /predict-yield forwarding function."""

import json
from unittest.mock import patch

import pytest
import requests

from cropyield.data.schema import CROP_OPTIONS, SOIL_OPTIONS

from conftest import fence, gateway_response, status_response


@pytest.fixture
def client(api_key):
    """Create test client with a fresh service built from defaults."""
    import cropyield.api.app as app_module
    from cropyield.config import GatewayConfig
    from cropyield.prediction.service import PredictionService

    app_module.service = PredictionService(GatewayConfig())

    from fastapi.testclient import TestClient
    return TestClient(app_module.app)


class TestHealthEndpoint:
    def test_health_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["credential_configured"] is True
        assert data["model"] == "google/gemini-2.5-flash"
        assert "version" in data

    def test_health_degraded_without_key(self, client, monkeypatch):
        monkeypatch.delenv("LOVABLE_API_KEY")
        data = client.get("/health").json()
        assert data["status"] == "degraded"
        assert data["credential_configured"] is False


class TestOptionsEndpoint:
    def test_options(self, client):
        data = client.get("/options").json()
        assert [c["value"] for c in data["crops"]] == [c["value"] for c in CROP_OPTIONS]
        assert [s["value"] for s in data["soils"]] == [s["value"] for s in SOIL_OPTIONS]
        assert {"value": "Banane", "label": "Banane (Banana)"} in data["crops"]
        assert len(data["soils"]) == 5
        assert data["quality_grades"] == ["Excellente", "Bonne", "Moyenne", "Faible"]
        assert data["risk_levels"] == ["Low", "Moderate", "High", "Critical"]


class TestPredictEndpoint:

    def test_predict_returns_normalized_result(self, client, banana_form, banana_payload):
        with patch("cropyield.prediction.gateway.requests.post") as mock_post:
            mock_post.return_value = gateway_response(fence(banana_payload))
            response = client.post("/predict-yield", json=banana_form)

        assert response.status_code == 200
        assert response.json() == banana_payload

    def test_missing_field_returns_400_without_gateway_call(self, client, banana_form):
        del banana_form["rainfall"]
        with patch("cropyield.prediction.gateway.requests.post") as mock_post:
            response = client.post("/predict-yield", json=banana_form)
        assert response.status_code == 400
        assert "rainfall" in response.json()["error"]
        mock_post.assert_not_called()

    def test_malformed_body_returns_400(self, client):
        response = client.post("/predict-yield", json={"cropType": ["Banane"]})
        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.parametrize("status,expected_status,fragment", [
        (429, 429, "Rate limits exceeded"),
        (402, 402, "Payment required"),
        (503, 500, "AI gateway error: 503"),
    ])
    def test_gateway_status_mapping(self, client, banana_form, status, expected_status, fragment):
        with patch("cropyield.prediction.gateway.requests.post") as mock_post:
            mock_post.return_value = status_response(status)
            response = client.post("/predict-yield", json=banana_form)
        assert response.status_code == expected_status
        assert fragment in response.json()["error"]

    def test_missing_key_returns_500(self, client, banana_form, monkeypatch):
        monkeypatch.delenv("LOVABLE_API_KEY")
        response = client.post("/predict-yield", json=banana_form)
        assert response.status_code == 500
        assert response.json() == {"error": "LOVABLE_API_KEY is not configured"}

    def test_unparseable_reply_returns_500(self, client, banana_form):
        with patch("cropyield.prediction.gateway.requests.post") as mock_post:
            mock_post.return_value = gateway_response("I am not sure.")
            response = client.post("/predict-yield", json=banana_form)
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to parse prediction data"}

    @pytest.mark.parametrize("token", ["NaN", "Infinity", "1e400"])
    def test_non_finite_reply_returns_json_500(self, client, banana_form, banana_payload, token):
        body = json.dumps(dict(banana_payload, yieldPerHectare="@@")).replace('"@@"', token)
        with patch("cropyield.prediction.gateway.requests.post") as mock_post:
            mock_post.return_value = gateway_response(f"```json\n{body}\n```")
            response = client.post("/predict-yield", json=banana_form)
        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"error": "Failed to parse prediction data"}

    def test_transport_failure_returns_500(self, client, banana_form):
        with patch("cropyield.prediction.gateway.requests.post") as mock_post:
            mock_post.side_effect = requests.exceptions.ConnectionError("refused")
            response = client.post("/predict-yield", json=banana_form)
        assert response.status_code == 500
        assert "error" in response.json()

    def test_cors_preflight(self, client):
        response = client.options(
            "/predict-yield",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


class TestMetricsEndpoint:
    def test_metrics_exposed(self, client, banana_form):
        client.post("/predict-yield", json=dict(banana_form, area=""))
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "predict_yield_requests_total" in response.text
        assert "predict_yield_errors_total" in response.text
