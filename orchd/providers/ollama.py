"""Ollama local daemon provider."""

from typing import Any

from orchd.exceptions import ProviderResponseError
from orchd.models.request import ModelConfig
from orchd.providers._base import Provider, envelope_error


class OllamaProvider(Provider):
    """Local chat API; no credential, non-streaming requests."""

    name = "ollama"
    label = "Ollama"
    env_var = None
    default_endpoint = "http://127.0.0.1:11434/api/chat"

    def build_payload(self, config: ModelConfig, content: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": config.model,
            "messages": [{"role": "user", "content": content}],
            "stream": False,
        }
        options: dict[str, Any] = {}
        temperature = config.effective_temperature()
        if temperature is not None:
            options["temperature"] = temperature
        max_tokens = config.effective_max_tokens()
        if max_tokens is not None:
            options["num_predict"] = max_tokens
        if options:
            payload["options"] = options
        return payload

    def parse_response(self, data: dict[str, Any]) -> str:
        error = envelope_error(data)
        if error is not None:
            raise ProviderResponseError(f"ollama error: {error}")

        message = data.get("message") or {}
        content = message.get("content")
        if not content:
            raise ProviderResponseError("ollama: no content in response")
        return content
