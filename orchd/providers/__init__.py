"""Provider capabilities and the registry that resolves them.

All providers implement the single ``Provider.call`` operation; adding a
provider means subclassing Provider and registering an instance, never
touching the orchestration engine.
"""

from orchd.providers._base import Provider, build_content
from orchd.providers.anthropic import AnthropicProvider
from orchd.providers.ollama import OllamaProvider
from orchd.providers.openai import OpenAIProvider
from orchd.providers.registry import ProviderRegistry, create_default_registry, register_default_providers

__all__ = [
    "Provider",
    "build_content",
    "OpenAIProvider",
    "AnthropicProvider",
    "OllamaProvider",
    "ProviderRegistry",
    "register_default_providers",
    "create_default_registry",
]
