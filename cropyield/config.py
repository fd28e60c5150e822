"""
Gateway configuration for the prediction service.

The completion endpoint, model identifier and sampling temperature are fixed
per deployment. The API credential is never stored here: it is read from the
process environment each time a request is dispatched, so rotating the key
does not require a restart.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_API_KEY_ENV = "LOVABLE_API_KEY"


@dataclass(frozen=True)
class GatewayConfig:
    """Where and how the completion request is sent."""
    endpoint: str = DEFAULT_GATEWAY_URL
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    api_key_env: str = DEFAULT_API_KEY_ENV
    # No deadline unless the caller asks for one
    timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        """
        Build a config from optional CROPYIELD_* overrides.

        Recognised variables:
            CROPYIELD_GATEWAY_URL   — completion endpoint
            CROPYIELD_MODEL         — model identifier
            CROPYIELD_TEMPERATURE   — sampling temperature
            CROPYIELD_API_KEY_ENV   — name of the variable holding the key
            CROPYIELD_TIMEOUT       — request timeout in seconds
        """
        temperature = DEFAULT_TEMPERATURE
        raw_temp = os.environ.get("CROPYIELD_TEMPERATURE")
        if raw_temp:
            try:
                temperature = float(raw_temp)
            except ValueError:
                logger.warning(
                    "Ignoring CROPYIELD_TEMPERATURE=%r (not a number)", raw_temp
                )

        timeout = None
        raw_timeout = os.environ.get("CROPYIELD_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                logger.warning(
                    "Ignoring CROPYIELD_TIMEOUT=%r (not a number)", raw_timeout
                )

        return cls(
            endpoint=os.environ.get("CROPYIELD_GATEWAY_URL", DEFAULT_GATEWAY_URL),
            model=os.environ.get("CROPYIELD_MODEL", DEFAULT_MODEL),
            temperature=temperature,
            api_key_env=os.environ.get("CROPYIELD_API_KEY_ENV", DEFAULT_API_KEY_ENV),
            timeout=timeout,
        )

    def resolve_api_key(self) -> Optional[str]:
        """Read the gateway credential from the environment (None if unset or blank)."""
        key = os.environ.get(self.api_key_env)
        if key is None or not key.strip():
            return None
        return key.strip()
