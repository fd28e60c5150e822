"""
Model gateway client: sends one chat-completion request and returns the
raw text of the first choice.

Request:  POST {endpoint}
          Authorization: Bearer <key>
          {"model": ..., "messages": [system, user], "temperature": ...}
Response: {"choices": [{"message": {"content": "<raw text>"}}]}

One attempt per call. There is no retry, no caching and no deadline unless
GatewayConfig.timeout is set by the caller.
"""

import logging
from typing import Any, Dict, Optional

import requests

from cropyield.config import GatewayConfig
from cropyield.prediction.errors import (
    ConfigurationError, ParseError, TransportError, error_for_status,
)
from cropyield.prediction.types import PromptPair

logger = logging.getLogger(__name__)


class GatewayClient:
    """
    Thin client for the completion endpoint.

    Usage:
        client = GatewayClient(GatewayConfig.from_env())
        text = client.complete(build_prompts(prediction_input))
    """

    def __init__(self, config: Optional[GatewayConfig] = None):
        self.config = config or GatewayConfig()

    def build_payload(self, prompts: PromptPair) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": prompts.system},
                {"role": "user", "content": prompts.user},
            ],
            "temperature": self.config.temperature,
        }

    def complete(self, prompts: PromptPair) -> str:
        """
        Send the prompts and return the first choice's content.

        Raises:
            ConfigurationError: credential not set (checked before any I/O)
            TransportError: no response received
            RateLimitError / QuotaError / GatewayError: non-2xx status
            ParseError: 2xx body is not the documented envelope
        """
        api_key = self.config.resolve_api_key()
        if not api_key:
            raise ConfigurationError(f"{self.config.api_key_env} is not configured")

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = requests.post(
                self.config.endpoint,
                headers=headers,
                json=self.build_payload(prompts),
                timeout=self.config.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.warning("AI gateway request failed: %s", e)
            raise TransportError() from e

        if not 200 <= resp.status_code < 300:
            raise error_for_status(resp.status_code, resp.text)

        return self._extract_content(resp)

    @staticmethod
    def _extract_content(resp: requests.Response) -> str:
        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("Unexpected AI gateway response body: %s", e)
            raise ParseError(raw_text=resp.text) from e

        if not isinstance(content, str):
            raise ParseError(raw_text=resp.text)
        return content
