"""orchd - fan one prompt out to many LLM providers concurrently.

orchd takes a single request (a prompt, an optional code excerpt and a list of
model configurations) and calls every configured model in parallel under one
overall deadline, collecting each answer or error:
- Batched mode returns one Response whose results are index-aligned with the request
- Streaming mode emits one event per model as it completes, then a final ``done``
- Providers (OpenAI, Anthropic, Ollama) are pluggable through a registry
- A failure in one model never affects its siblings

Quick Start:
    >>> import asyncio
    >>> from orchd import ModelConfig, Request, run
    >>>
    >>> request = Request(
    ...     prompt="Explain this function",
    ...     code="def add(a, b): return a + b",
    ...     models=[
    ...         ModelConfig(name="fast", provider="openai", model="gpt-4o-mini"),
    ...         ModelConfig(name="local", provider="ollama", model="llama3"),
    ...     ],
    ... )
    >>> response = asyncio.run(run(request))
    >>> print(response.to_json())

Main Components:
    - Orchestrator: Concurrent engine bound to a provider registry
    - run / run_stream: Batched and streaming entry points with a request deadline
    - ProviderRegistry / Provider: Provider abstraction and lookup
    - CallContext / deadline_scope: Shared deadline and cancellation
    - OrchdSettings: Global settings manager
"""

from orchd.config import OrchdSettings, get_settings, reload_settings, settings
from orchd.logging_config import setup_logging

_setup_logging_called = False


def _initialize_logging() -> None:
    """Initialize logging configuration from settings."""
    global _setup_logging_called
    if not _setup_logging_called:
        setup_logging(
            log_level=settings.log_level,
            log_file_level=settings.log_file_level,
            log_dir=settings.log_dir,
            log_file_name=settings.log_file_name,
            log_json_format=settings.log_json_format,
            log_max_bytes=settings.log_max_bytes,
            log_backup_count=settings.log_backup_count,
        )
        _setup_logging_called = True


# Configure logging from settings before any submodule asks for a logger
_initialize_logging()

from orchd.context import CallContext, deadline_scope  # noqa: E402
from orchd.engine import Orchestrator, run, run_stream  # noqa: E402
from orchd.events import StreamEvent  # noqa: E402
from orchd.exceptions import (  # noqa: E402
    ContextCancelledError,
    DeadlineExceededError,
    MissingCredentialError,
    OrchdError,
    ProviderConnectionError,
    ProviderError,
    ProviderResponseError,
    ProviderTimeoutError,
    RequestError,
    StreamWriteError,
    UnknownProviderError,
)
from orchd.models import ModelConfig, ModelResult, Request, Response  # noqa: E402
from orchd.providers import (  # noqa: E402
    Provider,
    ProviderRegistry,
    create_default_registry,
    register_default_providers,
)

__all__ = [
    # Engine
    "Orchestrator",
    "run",
    "run_stream",
    "CallContext",
    "deadline_scope",
    # Providers
    "Provider",
    "ProviderRegistry",
    "register_default_providers",
    "create_default_registry",
    # Models
    "ModelConfig",
    "Request",
    "ModelResult",
    "Response",
    "StreamEvent",
    # Exceptions
    "OrchdError",
    "RequestError",
    "StreamWriteError",
    "ProviderError",
    "UnknownProviderError",
    "MissingCredentialError",
    "ProviderConnectionError",
    "ProviderTimeoutError",
    "ProviderResponseError",
    "DeadlineExceededError",
    "ContextCancelledError",
    # Configuration
    "OrchdSettings",
    "settings",
    "get_settings",
    "reload_settings",
]
