"""Tests for extracting a PredictionResult from free-form model replies."""

import json
import pytest

from cropyield.prediction.errors import ParseError
from cropyield.prediction.normalizer import (
    REQUIRED_FIELDS, decode_reply, extract_json_candidate, normalize_reply,
    result_from_payload,
)
from cropyield.prediction.types import DiseaseRisk

from conftest import fence


class TestExtractJsonCandidate:

    def test_first_open_to_last_close(self):
        text = 'note {"a": {"b": 1}} trailing } end'
        assert extract_json_candidate(text) == '{"a": {"b": 1}} trailing }'

    def test_no_braces(self):
        assert extract_json_candidate("no json here") is None

    def test_close_before_open(self):
        assert extract_json_candidate("} then {") is None


class TestDecodeReply:

    def test_bare_json(self):
        assert decode_reply('{"x": 1}') == {"x": 1}

    def test_whole_text_fallback_without_braces(self):
        assert decode_reply("[1, 2, 3]") == [1, 2, 3]

    def test_garbage_raises_with_raw_text(self):
        with pytest.raises(ParseError) as exc:
            decode_reply("The model is thinking...")
        assert exc.value.raw_text == "The model is thinking..."
        assert exc.value.kind == "ParseError"

    def test_unbalanced_brace_substring_raises(self):
        with pytest.raises(ParseError):
            decode_reply('prefix {"yieldPerHectare": 12,')

    @pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_constants_rejected(self, token):
        with pytest.raises(ParseError):
            decode_reply('{"yieldPerHectare": ' + token + "}")


class TestNormalizeReply:

    def test_fenced_reply_round_trips(self, banana_payload):
        result = normalize_reply(fence(banana_payload))
        assert result.to_dict() == banana_payload
        assert result == result_from_payload(banana_payload)

    def test_plain_json_reply(self, banana_payload):
        result = normalize_reply(json.dumps(banana_payload))
        assert result.yield_per_hectare == 28.5
        assert result.total_production == 114
        assert result.disease_risks == (DiseaseRisk(
            name="Black Sigatoka", risk_level="High",
            conditions="high humidity and rainfall", yield_impact="-15%",
        ),)

    def test_values_are_not_normalized(self, banana_payload):
        banana_payload.update({
            "qualityGrade": "bonne",
            "confidenceLevel": 140,
            "totalProduction": 999,
        })
        banana_payload["diseaseRisks"][0]["riskLevel"] = "HIGH"
        result = normalize_reply(fence(banana_payload))
        assert result.quality_grade == "bonne"
        assert result.confidence_level == 140
        assert result.total_production == 999
        assert result.disease_risks[0].risk_level == "HIGH"

    @pytest.mark.parametrize("absent", [None, []])
    def test_disease_risks_optional(self, banana_payload, absent):
        if absent is None:
            del banana_payload["diseaseRisks"]
        else:
            banana_payload["diseaseRisks"] = absent
        assert normalize_reply(fence(banana_payload)).disease_risks == ()

    @pytest.mark.parametrize("field", REQUIRED_FIELDS)
    def test_missing_required_field_rejected(self, banana_payload, field):
        del banana_payload[field]
        raw = fence(banana_payload)
        with pytest.raises(ParseError) as exc:
            normalize_reply(raw)
        assert field in exc.value.message
        assert exc.value.raw_text == raw

    def test_null_required_field_rejected(self, banana_payload):
        banana_payload["analysis"] = None
        with pytest.raises(ParseError):
            normalize_reply(fence(banana_payload))

    @pytest.mark.parametrize("field,value", [
        ("yieldPerHectare", "28.5"),
        ("confidenceLevel", True),
        ("qualityGrade", 3),
        ("keyFactors", "high humidity"),
        ("recommendations", [1, 2]),
        ("diseaseRisks", {"name": "x"}),
    ])
    def test_wrong_types_rejected(self, banana_payload, field, value):
        banana_payload[field] = value
        with pytest.raises(ParseError):
            normalize_reply(fence(banana_payload))

    def test_incomplete_disease_risk_rejected(self, banana_payload):
        del banana_payload["diseaseRisks"][0]["yieldImpact"]
        with pytest.raises(ParseError, match="diseaseRisks\\[0\\]"):
            normalize_reply(fence(banana_payload))

    def test_json_array_reply_rejected(self):
        with pytest.raises(ParseError, match="object"):
            normalize_reply("[]")

    def test_prose_only_reply_rejected(self):
        with pytest.raises(ParseError):
            normalize_reply("I cannot make a prediction for these conditions.")

    def test_result_is_immutable(self, banana_payload):
        result = normalize_reply(fence(banana_payload))
        with pytest.raises(AttributeError):
            result.yield_per_hectare = 1.0
        assert isinstance(result.key_factors, tuple)

    @pytest.mark.parametrize("field", ["yieldPerHectare", "totalProduction", "confidenceLevel"])
    @pytest.mark.parametrize("token", ["NaN", "Infinity", "1e400", "1" + "0" * 400])
    def test_non_finite_numbers_rejected(self, banana_payload, field, token):
        body = json.dumps(dict(banana_payload, **{field: "@@"})).replace('"@@"', token)
        raw = f"```json\n{body}\n```"
        with pytest.raises(ParseError) as exc:
            normalize_reply(raw)
        assert exc.value.raw_text == raw

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_payload_value_rejected(self, banana_payload, value):
        with pytest.raises(ParseError):
            result_from_payload(dict(banana_payload, totalProduction=value))
