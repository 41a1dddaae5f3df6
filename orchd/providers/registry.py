"""Provider registry for orchd.

The registry maps provider ids to capability instances. It is populated once
at startup, through ``register_default_providers`` or explicit ``register``
calls, and only read while requests are being served.
"""

from collections.abc import Iterator

from orchd.logging_config import get_logger
from orchd.providers._base import Provider

logger = get_logger(__name__)


class ProviderRegistry:
    """Mapping from provider id to Provider instance.

    Example:
        >>> registry = ProviderRegistry()
        >>> register_default_providers(registry)
        >>> registry.resolve("openai")
        <orchd.providers.openai.OpenAIProvider object at ...>
        >>> registry.resolve("nope") is None
        True
    """

    def __init__(self):
        self._providers: dict[str, Provider] = {}

    def register(self, provider_id: str, provider: Provider) -> None:
        """Associate ``provider_id`` with ``provider``.

        Call during initialization only; the registry is not synchronised for
        mutation while requests are in flight. A later registration replaces an
        earlier one with the same id.
        """
        if provider_id in self._providers:
            logger.debug(f"Replacing provider registration: {provider_id}")
        self._providers[provider_id] = provider

    def resolve(self, provider_id: str) -> Provider | None:
        """Return the provider registered under ``provider_id``, or None."""
        return self._providers.get(provider_id)

    def ids(self) -> list[str]:
        return sorted(self._providers)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids())

    def __len__(self) -> int:
        return len(self._providers)


def register_default_providers(registry: ProviderRegistry, timeout: float | None = None) -> ProviderRegistry:
    """Register the built-in openai, anthropic and ollama providers.

    Args:
        registry: Registry to populate
        timeout: Optional transport timeout passed to every provider

    Returns:
        ProviderRegistry: The same registry, for chaining
    """
    from orchd.providers.anthropic import AnthropicProvider
    from orchd.providers.ollama import OllamaProvider
    from orchd.providers.openai import OpenAIProvider

    for provider in (OpenAIProvider(timeout=timeout), AnthropicProvider(timeout=timeout), OllamaProvider(timeout=timeout)):
        registry.register(provider.name, provider)
    return registry


def create_default_registry() -> ProviderRegistry:
    """Build a registry holding the built-in providers."""
    return register_default_providers(ProviderRegistry())
