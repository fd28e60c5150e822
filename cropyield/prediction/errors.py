"""
Error taxonomy for the prediction pipeline.

Every failure is surfaced as exactly one PredictionError subclass with a
``kind`` and a user-displayable ``message``. ``classify_error`` maps any
exception raised along the pipeline (including raw ``requests`` failures)
onto that taxonomy so nothing reaches the caller unclassified.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger(__name__)


# ---------- Kinds ----------
VALIDATION = "ValidationError"
CONFIGURATION = "ConfigurationError"
TRANSPORT = "TransportError"
RATE_LIMIT = "RateLimitError"
QUOTA = "QuotaError"
GATEWAY = "GatewayError"
PARSE = "ParseError"

ERROR_KINDS = [VALIDATION, CONFIGURATION, TRANSPORT, RATE_LIMIT, QUOTA, GATEWAY, PARSE]


class PredictionError(Exception):
    """Base class for all classified pipeline failures."""
    kind: str = GATEWAY
    recoverable: bool = True
    http_status: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_classified(self) -> "ClassifiedError":
        return ClassifiedError(kind=self.kind, message=self.message)


class ValidationError(PredictionError):
    """Local input check failed; never reaches the network."""
    kind = VALIDATION
    http_status = 400
    default_message = "Invalid prediction input"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None,
                 field_class: Optional[str] = None):
        self.field = field
        self.field_class = field_class
        super().__init__(message)

    def to_classified(self) -> "ClassifiedError":
        return ClassifiedError(kind=self.kind, message=self.message, field=self.field)


class ConfigurationError(PredictionError):
    """Gateway credential missing at dispatch time."""
    kind = CONFIGURATION
    recoverable = False
    default_message = "Gateway credential is not configured"


class TransportError(PredictionError):
    """No response received from the remote service."""
    kind = TRANSPORT
    default_message = "Could not reach the prediction service. Please try again."


class RateLimitError(PredictionError):
    kind = RATE_LIMIT
    http_status = 429
    default_message = "Rate limits exceeded. Please try again later."


class QuotaError(PredictionError):
    kind = QUOTA
    recoverable = False
    http_status = 402
    default_message = "Payment required. Please add credits to your workspace."


class GatewayError(PredictionError):
    """Any other non-2xx answer from the gateway."""
    kind = GATEWAY

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.status_code = status_code
        if message is None:
            message = (
                f"AI gateway error: {status_code}" if status_code is not None
                else self.default_message
            )
        super().__init__(message)

    def to_classified(self) -> "ClassifiedError":
        return ClassifiedError(
            kind=self.kind, message=self.message, status_code=self.status_code
        )


class ParseError(PredictionError):
    """Reply received but could not be decoded into a PredictionResult."""
    kind = PARSE
    default_message = "Failed to parse prediction data"

    def __init__(self, message: Optional[str] = None, raw_text: str = ""):
        self.raw_text = raw_text
        super().__init__(message)

    def to_classified(self) -> "ClassifiedError":
        return ClassifiedError(kind=self.kind, message=self.message, raw_text=self.raw_text)


@dataclass(frozen=True)
class ClassifiedError:
    """What the state machine and the presentation layer get to see."""
    kind: str
    message: str
    status_code: Optional[int] = None
    field: Optional[str] = None
    raw_text: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"kind": self.kind, "message": self.message}
        if self.status_code is not None:
            data["status_code"] = self.status_code
        if self.field is not None:
            data["field"] = self.field
        return data


def error_for_status(status_code: int, detail: str = "") -> PredictionError:
    """Map a non-2xx gateway status to its error class."""
    if status_code == 429:
        return RateLimitError()
    if status_code == 402:
        return QuotaError()
    if detail:
        logger.error("AI gateway error: %s %s", status_code, detail[:500])
    return GatewayError(status_code=status_code)


def classify_error(exc: BaseException) -> ClassifiedError:
    """
    Map any pipeline exception to a ClassifiedError.

    Priority:
        1. Already-classified PredictionError (configuration, validation,
           parse, status errors raised by the gateway client)
        2. requests.HTTPError with a response -> by status code
        3. Other requests failures (no response) -> TransportError
        4. Anything else -> GatewayError with a generic message
    """
    if isinstance(exc, PredictionError):
        return exc.to_classified()

    if isinstance(exc, requests.exceptions.HTTPError) and exc.response is not None:
        return error_for_status(exc.response.status_code).to_classified()

    if isinstance(exc, requests.exceptions.RequestException):
        logger.warning("Transport failure: %s", exc)
        return TransportError().to_classified()

    logger.error("Unclassified prediction failure", exc_info=exc)
    return GatewayError().to_classified()
