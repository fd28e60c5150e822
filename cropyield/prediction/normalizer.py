"""
Response normalizer: turns the model's free-form reply into a strict
PredictionResult.

Models often wrap the JSON payload in prose or markdown fences, so the
reply goes through a small fallback ladder:

    1. Take the substring from the first "{" to the last "}" and parse it
    2. If the text has no such substring, parse the whole text
    3. Otherwise fail with ParseError (carrying the raw reply)

A parsed object must carry every required field with the right JSON type.
Missing fields are never filled with defaults, and values are not
range-checked or re-cased.
"""

import json
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from cropyield.prediction.errors import ParseError
from cropyield.prediction.types import DiseaseRisk, PredictionResult

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [
    "yieldPerHectare", "totalProduction", "confidenceLevel", "qualityGrade",
    "keyFactors", "recommendations", "analysis",
]
NUMERIC_FIELDS = ["yieldPerHectare", "totalProduction", "confidenceLevel"]
STRING_FIELDS = ["qualityGrade", "analysis"]
STRING_LIST_FIELDS = ["keyFactors", "recommendations"]
RISK_FIELDS = ["name", "riskLevel", "conditions", "yieldImpact"]


def extract_json_candidate(text: str) -> Optional[str]:
    """Return the first-"{" to last-"}" substring, or None if there is none."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return text[start:end + 1]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} in reply")


def decode_reply(raw_text: str) -> Any:
    """Run the extraction ladder and return the decoded JSON value."""
    if not isinstance(raw_text, str):
        raise ParseError(raw_text=repr(raw_text))

    candidate = extract_json_candidate(raw_text)
    source = candidate if candidate is not None else raw_text
    try:
        return json.loads(source, parse_constant=_reject_constant)
    except ValueError as e:
        logger.error("Failed to parse AI response: %s", raw_text[:500])
        raise ParseError(raw_text=raw_text) from e


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # 1e400 decodes to inf; a 400-digit integer does not fit a float at all
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _string_list(payload: Dict[str, Any], name: str, raw_text: str) -> Tuple[str, ...]:
    value = payload[name]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ParseError(f"Prediction field '{name}' must be a list of strings",
                         raw_text=raw_text)
    return tuple(value)


def _disease_risks(value: Any, raw_text: str) -> Tuple[DiseaseRisk, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ParseError("Prediction field 'diseaseRisks' must be a list",
                         raw_text=raw_text)

    risks: List[DiseaseRisk] = []
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise ParseError(f"diseaseRisks[{i}] must be an object", raw_text=raw_text)
        missing = [f for f in RISK_FIELDS if f not in item]
        if missing:
            raise ParseError(f"diseaseRisks[{i}] is missing {missing}", raw_text=raw_text)
        wrong = [f for f in RISK_FIELDS if not isinstance(item[f], str)]
        if wrong:
            raise ParseError(f"diseaseRisks[{i}] fields {wrong} must be strings",
                             raw_text=raw_text)
        risks.append(DiseaseRisk(
            name=item["name"],
            risk_level=item["riskLevel"],
            conditions=item["conditions"],
            yield_impact=item["yieldImpact"],
        ))
    return tuple(risks)


def result_from_payload(payload: Any, raw_text: str = "") -> PredictionResult:
    """
    Build a PredictionResult from an already-decoded JSON value.

    Raises:
        ParseError if the value is not an object, lacks a required field,
        or a field has the wrong type.
    """
    if not raw_text:
        raw_text = json.dumps(payload, ensure_ascii=False, default=str)

    if not isinstance(payload, dict):
        raise ParseError("Prediction data must be a JSON object", raw_text=raw_text)

    missing = [f for f in REQUIRED_FIELDS if f not in payload or payload[f] is None]
    if missing:
        raise ParseError(f"Prediction data is missing required fields: {missing}",
                         raw_text=raw_text)

    for name in NUMERIC_FIELDS:
        if not _is_number(payload[name]):
            raise ParseError(f"Prediction field '{name}' must be a number",
                             raw_text=raw_text)
    for name in STRING_FIELDS:
        if not isinstance(payload[name], str):
            raise ParseError(f"Prediction field '{name}' must be a string",
                             raw_text=raw_text)

    return PredictionResult(
        yield_per_hectare=payload["yieldPerHectare"],
        total_production=payload["totalProduction"],
        confidence_level=payload["confidenceLevel"],
        quality_grade=payload["qualityGrade"],
        key_factors=_string_list(payload, "keyFactors", raw_text),
        recommendations=_string_list(payload, "recommendations", raw_text),
        analysis=payload["analysis"],
        disease_risks=_disease_risks(payload.get("diseaseRisks"), raw_text),
    )


def normalize_reply(raw_text: str) -> PredictionResult:
    """Extract and validate a PredictionResult from the model's raw reply."""
    return result_from_payload(decode_reply(raw_text), raw_text)
