"""Anthropic messages provider."""

from typing import Any

from orchd.exceptions import ProviderResponseError
from orchd.models.request import ModelConfig
from orchd.providers._base import Provider, envelope_error

# The messages API requires max_tokens on every request
DEFAULT_MAX_TOKENS = 2048
API_VERSION = "2023-06-01"


class AnthropicProvider(Provider):
    """Hosted messages API authenticated with an API-key header and a version header."""

    name = "anthropic"
    label = "Anthropic"
    env_var = "ANTHROPIC_API_KEY"
    default_endpoint = "https://api.anthropic.com/v1/messages"

    def build_headers(self, api_key: str | None) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": api_key or "",
            "anthropic-version": API_VERSION,
        }

    def build_payload(self, config: ModelConfig, content: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": config.model,
            "max_tokens": config.effective_max_tokens(DEFAULT_MAX_TOKENS),
            "messages": [{"role": "user", "content": content}],
        }
        temperature = config.effective_temperature()
        if temperature is not None:
            payload["temperature"] = temperature
        return payload

    def parse_response(self, data: dict[str, Any]) -> str:
        error = envelope_error(data)
        if error is not None:
            raise ProviderResponseError(f"anthropic error: {error}")

        blocks = data.get("content") or []
        if not blocks:
            raise ProviderResponseError("anthropic: no content in response")

        text = blocks[0].get("text")
        if not text:
            raise ProviderResponseError("anthropic: no content in response")
        return text
