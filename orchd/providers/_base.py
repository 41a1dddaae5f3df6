"""Base provider interface for orchd.

This module defines the abstract base class every provider capability
implements. The engine only ever calls ``Provider.call``; concrete providers
describe their wire format through the payload and response hooks.
"""

import os
from abc import ABC, abstractmethod
from typing import Any

import httpx

from orchd.config import get_settings
from orchd.context import CallContext
from orchd.exceptions import MissingCredentialError, ProviderResponseError, classify_transport_error
from orchd.logging_config import get_logger
from orchd.models.request import ModelConfig

logger = get_logger(__name__)


def build_content(prompt: str, code: str) -> str:
    """Return the user content: the prompt, with the code fenced below it when present."""
    if not code:
        return prompt
    return f"{prompt}\n\n```code\n{code}\n```"


def envelope_error(data: dict[str, Any]) -> str | None:
    """Return the provider-reported error message in ``data``, if there is one.

    Accepts both ``{"error": {"message": ...}}`` and ``{"error": "..."}``.
    """
    error = data.get("error")
    if error is None or error == "":
        return None
    if isinstance(error, dict):
        return str(error.get("message") or "")
    return str(error)


class Provider(ABC):
    """Abstract base class for provider capabilities.

    Subclasses set the class attributes and implement ``build_payload`` and
    ``parse_response``. ``call`` resolves the endpoint and credential, issues
    exactly one POST and translates the response envelope.

    Attributes:
        name: Provider id the capability is registered under
        label: Human-readable provider name used in messages
        env_var: Environment variable holding the API key; None for no-auth providers
        default_endpoint: Endpoint used when the model config has none

    Example:
        >>> class EchoProvider(Provider):
        ...     name = "echo"
        ...     default_endpoint = "http://localhost:9000/echo"
        ...
        ...     def build_payload(self, config, content):
        ...         return {"text": content}
        ...
        ...     def parse_response(self, data):
        ...         return data["text"]
    """

    name: str = ""
    label: str = ""
    env_var: str | None = None
    default_endpoint: str = ""

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize a Provider.

        Args:
            timeout: Transport timeout in seconds; defaults to settings.http_timeout_seconds
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.timeout = timeout
        self.transport = transport

    @property
    def requires_credential(self) -> bool:
        return self.env_var is not None

    def resolve_api_key(self, config: ModelConfig) -> str | None:
        """Resolve the API key: explicit config, then environment.

        Raises:
            MissingCredentialError: If the provider needs a key and none is available
        """
        if not self.requires_credential:
            return None
        api_key = config.api_key or os.environ.get(self.env_var, "")
        if not api_key:
            raise MissingCredentialError(f"missing {self.label or self.name} API key")
        return api_key

    def resolve_endpoint(self, config: ModelConfig) -> str:
        return config.endpoint or self.default_endpoint

    def build_headers(self, api_key: str | None) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    @abstractmethod
    def build_payload(self, config: ModelConfig, content: str) -> dict[str, Any]:
        """Build the JSON request body for this provider."""
        pass

    @abstractmethod
    def parse_response(self, data: dict[str, Any]) -> str:
        """Extract the answer text from a decoded response envelope.

        Raises:
            ProviderResponseError: If the envelope reports an error or carries no answer
        """
        pass

    async def call(self, context: CallContext, config: ModelConfig, prompt: str, code: str) -> str:
        """Invoke the provider once and return the full answer text.

        Args:
            context: Shared call context; its remaining time caps the transport timeout
            config: Model configuration for this invocation
            prompt: Prompt text
            code: Code excerpt, may be empty

        Returns:
            str: The answer text

        Raises:
            ProviderError: On any credential, transport or envelope failure
        """
        api_key = self.resolve_api_key(config)
        endpoint = self.resolve_endpoint(config)
        payload = self.build_payload(config, build_content(prompt, code))

        timeout = self.timeout or get_settings().http_timeout_seconds
        remaining = context.remaining()
        if remaining:
            timeout = min(timeout, remaining)

        logger.debug(f"Calling {self.name}: model={config.model}, endpoint={endpoint}, timeout={timeout:.1f}s")

        async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
            try:
                response = await client.post(endpoint, json=payload, headers=self.build_headers(api_key))
            except httpx.HTTPError as e:
                raise classify_transport_error(self.name, e) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderResponseError(
                f"{self.name}: invalid response body (HTTP {response.status_code})"
            ) from e
        if not isinstance(data, dict):
            raise ProviderResponseError(f"{self.name}: unexpected response envelope (HTTP {response.status_code})")

        # Envelope fields of the wrong JSON type surface here
        try:
            text = self.parse_response(data)
        except (AttributeError, TypeError, IndexError, KeyError) as e:
            raise ProviderResponseError(f"{self.name}: malformed response envelope") from e
        if not isinstance(text, str):
            raise ProviderResponseError(f"{self.name}: malformed response envelope")
        return text
