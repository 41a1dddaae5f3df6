"""OpenAI chat completions provider."""

from typing import Any

from orchd.exceptions import ProviderResponseError
from orchd.models.request import ModelConfig
from orchd.providers._base import Provider, envelope_error


class OpenAIProvider(Provider):
    """Hosted chat completions API with bearer authentication."""

    name = "openai"
    label = "OpenAI"
    env_var = "OPENAI_API_KEY"
    default_endpoint = "https://api.openai.com/v1/chat/completions"

    def build_headers(self, api_key: str | None) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

    def build_payload(self, config: ModelConfig, content: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": config.model,
            "messages": [{"role": "user", "content": content}],
        }
        temperature = config.effective_temperature()
        if temperature is not None:
            payload["temperature"] = temperature
        max_tokens = config.effective_max_tokens()
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return payload

    def parse_response(self, data: dict[str, Any]) -> str:
        error = envelope_error(data)
        if error is not None:
            raise ProviderResponseError(f"openai error: {error}")

        choices = data.get("choices") or []
        if not choices:
            raise ProviderResponseError("openai: no choices in response")

        message = choices[0].get("message") or {}
        content = message.get("content")
        if not content:
            raise ProviderResponseError("openai: no content in response")
        return content
