"""Exception hierarchy for orchd.

Exception Hierarchy:
    - OrchdError (base)
        - RequestError: empty, unreadable or malformed request input
        - StreamWriteError: a streaming event could not be written to the sink
        - ProviderError: failure of one model invocation, isolated to its result
            - UnknownProviderError: provider id is not registered
            - MissingCredentialError: no API key from config or environment
            - ProviderConnectionError: transport failure
                - ProviderTimeoutError: transport timed out
            - ProviderResponseError: malformed envelope, provider-reported error or empty answer
            - DeadlineExceededError: the request deadline elapsed
            - ContextCancelledError: the request was cancelled by the caller

Only RequestError and StreamWriteError are fatal to an invocation. Every
ProviderError is rendered into the owning model's ``error`` field.
"""

import httpx


class OrchdError(Exception):
    """Base exception for orchd errors."""

    pass


class RequestError(OrchdError):
    """Raised when the request document cannot be read or parsed."""

    pass


class StreamWriteError(OrchdError):
    """Raised when writing a streaming event to the sink fails."""

    pass


class ProviderError(OrchdError):
    """Raised when a single provider invocation fails."""

    pass


class UnknownProviderError(ProviderError):
    """Raised when a model names a provider id that is not registered."""

    def __init__(self, provider_id: str):
        self.provider_id = provider_id
        super().__init__(f"unknown provider: {provider_id}")


class MissingCredentialError(ProviderError):
    """Raised when a credentialed provider has no API key to use."""

    pass


class ProviderConnectionError(ProviderError):
    """Raised when the outbound HTTP call fails at the transport level."""

    pass


class ProviderTimeoutError(ProviderConnectionError):
    """Raised when the transport's own timeout fires."""

    pass


class ProviderResponseError(ProviderError):
    """Raised when the provider envelope is malformed, reports an error or carries no answer."""

    pass


class DeadlineExceededError(ProviderError):
    """Raised in every in-flight call when the shared deadline elapses."""

    pass


class ContextCancelledError(ProviderError):
    """Raised in every in-flight call when the shared context is cancelled."""

    pass


def classify_transport_error(provider: str, error: httpx.HTTPError) -> ProviderError:
    """Classify an httpx error into our provider exception types.

    Args:
        provider: Provider id used to prefix the message
        error: The transport error raised by httpx

    Returns:
        The matching ProviderError subclass instance
    """
    detail = str(error) or type(error).__name__
    if isinstance(error, httpx.TimeoutException):
        return ProviderTimeoutError(f"{provider}: request timed out: {detail}")
    if isinstance(error, httpx.TransportError):
        return ProviderConnectionError(f"{provider}: connection error: {detail}")
    return ProviderError(f"{provider}: request failed: {detail}")
