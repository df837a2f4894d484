"""
Anthropic Provider

Generation-only backend for the Anthropic Messages API.
"""

import logging
from typing import Any, Dict

import requests

from ..errors import ProviderError, ValidationError
from .base import Capability, ModelProvider

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(ModelProvider):
    """
    Claude backend. Anthropic has no embeddings endpoint, so this provider
    only generates text; pair it with an embedding-capable provider.
    """

    name = "anthropic"
    capabilities = frozenset({Capability.GENERATE})

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-7-sonnet-latest",
        api_url: str = ANTHROPIC_API_URL,
        max_retries: int = 3,
        timeout: float = 60.0
    ):
        """
        Initialize the provider.

        Args:
            api_key: Anthropic API key
            model: Claude model name
            api_url: Messages endpoint
            max_retries: Attempts per request before giving up
            timeout: Request timeout in seconds
        """
        if max_retries < 1:
            raise ValidationError(f"max_retries must be at least 1, got {max_retries}")

        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.max_retries = max_retries
        self.timeout = timeout

    def generate(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        """
        Produce a Claude completion.

        Args:
            system_prompt: Sent as the top-level `system` field
            user_prompt: Single user message (context + question)
            max_tokens: Generation length budget

        Returns:
            Text of the first text content block
        """
        payload = {
            "model": self.model,
            "max_tokens": max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}]
        }
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION
        }

        for attempt in range(self.max_retries):
            try:
                response = requests.post(
                    self.api_url,
                    json=payload,
                    headers=headers,
                    timeout=self.timeout
                )
                response.raise_for_status()
                data = response.json()
                break

            except (requests.RequestException, ValueError) as e:
                if attempt == self.max_retries - 1:
                    raise ProviderError(
                        f"Messages request failed after {self.max_retries} attempts: {e}",
                        backend=self.name
                    ) from e
                logger.warning(f"Retry {attempt + 1}/{self.max_retries} after error: {e}")

        return self._first_text(data)

    def _first_text(self, data: Dict[str, Any]) -> str:
        """Return the first `text` block of a Messages response."""
        try:
            for block in data["content"]:
                if block.get("type") == "text":
                    return block["text"]
        except (KeyError, TypeError, AttributeError) as e:
            raise ProviderError(f"Malformed messages response: {e}", backend=self.name) from e

        raise ProviderError("Response contained no text content", backend=self.name)

    def get_info(self) -> Dict[str, Any]:
        """Get client information."""
        return {
            **super().get_info(),
            "model": self.model,
            "has_api_key": bool(self.api_key)
        }
