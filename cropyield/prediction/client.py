"""
Client for the forwarding function (POST /predict-yield).

Maps the function's HTTP envelope back onto the error taxonomy so a remote
deployment can drive the request state machine exactly like an in-process
PredictionService.
"""

import logging
from typing import Any, Mapping, Optional, Union

import requests

from cropyield.prediction.errors import (
    GatewayError, ParseError, QuotaError, RateLimitError, TransportError,
    ValidationError,
)
from cropyield.prediction.normalizer import result_from_payload
from cropyield.prediction.types import PredictionInput, PredictionResult

logger = logging.getLogger(__name__)

PREDICT_PATH = "/predict-yield"

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again in a moment."
QUOTA_MESSAGE = "Service credits depleted. Please contact support."
GENERIC_MESSAGE = "Failed to generate prediction. Please try again."


class FunctionClient:
    """Posts prediction envelopes to a running forwarding function."""

    def __init__(self, base_url: str, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def url(self) -> str:
        return self.base_url + PREDICT_PATH

    def predict(self, prediction_input: Union[PredictionInput, Mapping[str, Any]]) -> PredictionResult:
        if isinstance(prediction_input, PredictionInput):
            body = prediction_input.to_dict()
        else:
            body = dict(prediction_input)

        try:
            resp = requests.post(self.url, json=body, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning("Prediction function unreachable: %s", e)
            raise TransportError() from e

        data = self._json_or_none(resp)

        if not 200 <= resp.status_code < 300:
            logger.error("Prediction error: %s %s", resp.status_code, resp.text[:500])
            if resp.status_code == 429:
                raise RateLimitError(RATE_LIMIT_MESSAGE)
            if resp.status_code == 402:
                raise QuotaError(QUOTA_MESSAGE)
            if resp.status_code == 400:
                message = data.get("error") if isinstance(data, dict) else None
                raise ValidationError(message)
            raise GatewayError(GENERIC_MESSAGE, status_code=resp.status_code)

        if data is None:
            raise ParseError(raw_text=resp.text)
        if isinstance(data, dict) and "error" in data:
            raise GatewayError(str(data["error"]), status_code=resp.status_code)

        return result_from_payload(data, raw_text=resp.text)

    __call__ = predict

    @staticmethod
    def _json_or_none(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return None
