"""Shared fixtures: a complete form and a well-formed model reply."""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


BANANA_FORM = {
    "cropType": "Banane",
    "soilType": "Argileux",
    "humidity": 90,
    "moisture": 85,
    "temperature": 30,
    "rainfall": 250,
    "area": 4,
}

BANANA_PAYLOAD = {
    "yieldPerHectare": 28.5,
    "totalProduction": 114,
    "confidenceLevel": 72,
    "qualityGrade": "Bonne",
    "diseaseRisks": [{
        "name": "Black Sigatoka",
        "riskLevel": "High",
        "conditions": "high humidity and rainfall",
        "yieldImpact": "-15%",
    }],
    "keyFactors": ["high humidity"],
    "recommendations": ["improve drainage"],
    "analysis": "...",
}


def fence(payload: dict, preamble: str = "Here is the prediction:\n",
          trailer: str = "\nLet me know if you need more detail.") -> str:
    """Wrap a payload the way chat models usually answer."""
    return f"{preamble}```json\n{json.dumps(payload, ensure_ascii=False)}\n```{trailer}"


def gateway_response(content: str, status_code: int = 200) -> MagicMock:
    """Mock requests.Response carrying a chat-completion envelope."""
    body = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = body
    resp.text = json.dumps(body)
    return resp


def status_response(status_code: int, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    resp.json.side_effect = ValueError("no json")
    return resp


@pytest.fixture
def banana_form():
    return dict(BANANA_FORM)


@pytest.fixture
def banana_payload():
    return json.loads(json.dumps(BANANA_PAYLOAD))


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("LOVABLE_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.delenv("LOVABLE_API_KEY", raising=False)
