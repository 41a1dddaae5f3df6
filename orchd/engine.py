"""orchd orchestration engine - fan one request out to many providers.

This module dispatches a Request concurrently to every configured model and
collects the outcomes, either as one index-aligned Response (batched mode) or
as a stream of events in completion order (streaming mode).

Core Components:
    - Orchestrator: Engine bound to a ProviderRegistry
    - run: Batched mode under a deadline derived from the request
    - run_stream: Streaming mode under a deadline derived from the request

Guarantees:
    - One asyncio task per configured model, launched without throttling
    - A failure in one model never aborts its siblings; it becomes that model's ``error``
    - Batched results are index-aligned with ``request.models``
    - Streaming emits exactly one ``done`` event, always last
    - Nothing is retried

Example:
    >>> import asyncio, sys
    >>> from orchd.engine import run, run_stream
    >>> from orchd.models import Request
    >>>
    >>> request = Request.model_validate_json(sys.stdin.read())
    >>> response = asyncio.run(run(request))
    >>> print(response.to_json())
"""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import TextIO

from orchd.context import CallContext, deadline_scope
from orchd.events import StreamEvent
from orchd.exceptions import ProviderError, StreamWriteError, UnknownProviderError
from orchd.logging_config import get_logger
from orchd.models.request import ModelConfig, Request
from orchd.models.result import ModelResult, Response
from orchd.providers.registry import ProviderRegistry, create_default_registry
from orchd.telemetry import record_result, trace_provider_call

logger = get_logger(__name__)

# Marks the end of the streaming delivery queue
_CLOSED = object()


class Orchestrator:
    """Concurrent fan-out/fan-in engine over a provider registry.

    The engine depends only on the Provider abstraction: providers are looked
    up by id at dispatch time, so registering a new provider never touches
    this class.

    Example:
        >>> orchestrator = Orchestrator()
        >>> async with deadline_scope(request.effective_timeout()) as context:
        ...     response = await orchestrator.run(context, request)
    """

    def __init__(self, registry: ProviderRegistry | None = None):
        """Initialize an Orchestrator.

        Args:
            registry: Provider registry to resolve ids against; when omitted a
                registry holding the built-in providers is bootstrapped
        """
        self.registry = registry if registry is not None else create_default_registry()

    async def invoke(self, context: CallContext, request: Request, config: ModelConfig) -> ModelResult:
        """Run one configured model and capture its outcome.

        Never raises for a per-model failure: unknown providers, provider
        errors and unexpected exceptions all become the result's ``error``.

        Args:
            context: Shared call context bounding the provider call
            request: The request being served
            config: The model configuration to invoke

        Returns:
            ModelResult: Exactly one of ``text`` or ``error`` is set
        """
        provider = self.registry.resolve(config.provider)
        if provider is None:
            error = UnknownProviderError(config.provider)
            logger.info(f"Model {config.name!r}: {error}")
            return ModelResult.failure(config, str(error))

        start_time = time.time()
        with trace_provider_call(provider=config.provider, model=config.model, name=config.name) as span:
            try:
                text = await context.bound(provider.call(context, config, request.prompt, request.code))
                result = ModelResult.success(config, text)
            except ProviderError as e:
                result = ModelResult.failure(config, str(e))
            except Exception as e:
                logger.warning(f"Model {config.name!r} ({config.provider}) raised unexpectedly: {e}", exc_info=True)
                result = ModelResult.failure(config, f"{type(e).__name__}: {e}")
            record_result(span, result.error)

        elapsed = time.time() - start_time
        if result.ok:
            logger.info(f"Model {config.name!r} ({config.provider}) answered in {elapsed:.3f}s")
        else:
            logger.info(f"Model {config.name!r} ({config.provider}) failed after {elapsed:.3f}s: {result.error}")
        return result

    async def run(self, context: CallContext, request: Request) -> Response:
        """Batched mode: invoke every model concurrently and wait for all of them.

        Args:
            context: Shared call context; its expiry reaches every in-flight call
            request: The request to fan out

        Returns:
            Response: ``results[i]`` corresponds to ``request.models[i]``
        """
        logger.debug(f"Running batched request: models={len(request.models)}")
        results = await asyncio.gather(*(self.invoke(context, request, config) for config in request.models))
        return Response(results=list(results))

    async def stream(self, context: CallContext, request: Request) -> AsyncIterator[StreamEvent]:
        """Streaming mode as an async iterator of events.

        Yields one ``result`` event per model as soon as it completes, then one
        ``done`` event. A model whose result is ready while the context is done
        and the delivery queue is full drops the result silently.

        Args:
            context: Shared call context
            request: The request to fan out

        Yields:
            StreamEvent: ``result`` events in completion order, then ``done``
        """
        logger.debug(f"Running streaming request: models={len(request.models)}")
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)

        async def produce(config: ModelConfig) -> None:
            result = await self.invoke(context, request, config)
            try:
                queue.put_nowait(result)
                return
            except asyncio.QueueFull:
                pass
            try:
                await context.bound(queue.put(result))
            except ProviderError:
                logger.debug(f"Dropped result for model {config.name!r}: {context.error}")

        tasks = [asyncio.create_task(produce(config), name=f"orchd:{config.name}") for config in request.models]

        async def supervise() -> None:
            await asyncio.gather(*tasks)
            await queue.put(_CLOSED)

        supervisor = asyncio.create_task(supervise(), name="orchd:supervisor")
        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    break
                yield StreamEvent.result(item)
            yield StreamEvent.done()
        finally:
            if not supervisor.done():
                supervisor.cancel()
                for task in tasks:
                    task.cancel()
                await asyncio.gather(supervisor, *tasks, return_exceptions=True)

    async def run_stream(self, context: CallContext, request: Request, sink: TextIO) -> None:
        """Streaming mode: write each event to ``sink`` as one JSON line.

        Args:
            context: Shared call context
            request: The request to fan out
            sink: Text stream receiving newline-delimited JSON events

        Raises:
            StreamWriteError: If writing an event fails; the stream is abandoned
                and outstanding model tasks are cancelled
        """
        async with aclosing(self.stream(context, request)) as events:
            async for event in events:
                write_event(sink, event)


def write_event(sink: TextIO, event: StreamEvent) -> None:
    """Write one event line to ``sink`` and flush it.

    Raises:
        StreamWriteError: If the sink rejects the write
    """
    try:
        sink.write(event.to_line())
        sink.flush()
    except (OSError, ValueError) as e:
        raise StreamWriteError(f"failed to write {event.event} event: {e}") from e


async def run(request: Request, orchestrator: Orchestrator | None = None) -> Response:
    """Run a request in batched mode under its own deadline.

    Args:
        request: The request to fan out
        orchestrator: Engine to use; a default Orchestrator when omitted

    Returns:
        Response: Index-aligned results
    """
    orchestrator = orchestrator or Orchestrator()
    async with deadline_scope(request.effective_timeout()) as context:
        return await orchestrator.run(context, request)


async def run_stream(request: Request, sink: TextIO, orchestrator: Orchestrator | None = None) -> None:
    """Run a request in streaming mode under its own deadline.

    Args:
        request: The request to fan out
        sink: Text stream receiving newline-delimited JSON events
        orchestrator: Engine to use; a default Orchestrator when omitted

    Raises:
        StreamWriteError: If writing an event fails
    """
    orchestrator = orchestrator or Orchestrator()
    async with deadline_scope(request.effective_timeout()) as context:
        await orchestrator.run_stream(context, request, sink)
