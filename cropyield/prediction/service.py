"""
Prediction service: the forwarding function's core logic.

    candidate form -> validate -> build prompts -> gateway -> normalize

Failures propagate as PredictionError subclasses; the API layer and the
request state machine decide how to present them.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

from cropyield.config import GatewayConfig
from cropyield.data.validation import validate_input, check_ranges
from cropyield.prediction.gateway import GatewayClient
from cropyield.prediction.normalizer import normalize_reply
from cropyield.prediction.prompts import build_prompts
from cropyield.prediction.types import PredictionInput, PredictionResult

logger = logging.getLogger(__name__)


@dataclass
class PredictionReport:
    """Result plus the context the CLI and logs want alongside it."""
    prediction_input: PredictionInput
    result: PredictionResult
    raw_reply: str
    latency_s: float
    warnings: List[str] = field(default_factory=list)


class PredictionService:
    """
    Stateless orchestrator for one prediction per call.

    Usage:
        service = PredictionService(GatewayConfig.from_env())
        result = service.predict({"cropType": "Banane", ...})
    """

    def __init__(self, config: Optional[GatewayConfig] = None,
                 gateway: Optional[GatewayClient] = None):
        self.config = config or GatewayConfig()
        self.gateway = gateway or GatewayClient(self.config)

    def run(self, candidate: Union[Mapping[str, Any], PredictionInput]) -> PredictionReport:
        """Execute the full pipeline and return the result with its context."""
        start_time = time.time()

        # Step 1: Validate before anything touches the network
        prediction_input = validate_input(candidate)
        warnings = check_ranges(prediction_input)
        for w in warnings:
            logger.warning("Input outside typical range: %s", w)

        logger.info("Prediction request: %s", prediction_input.to_dict())

        # Step 2: Render prompts
        prompts = build_prompts(prediction_input)

        # Step 3: Single gateway call
        raw_reply = self.gateway.complete(prompts)
        logger.info("AI response: %s", raw_reply)

        # Step 4: Normalize
        result = normalize_reply(raw_reply)

        return PredictionReport(
            prediction_input=prediction_input,
            result=result,
            raw_reply=raw_reply,
            latency_s=time.time() - start_time,
            warnings=warnings,
        )

    def predict(self, candidate: Union[Mapping[str, Any], PredictionInput]) -> PredictionResult:
        return self.run(candidate).result

    __call__ = predict
