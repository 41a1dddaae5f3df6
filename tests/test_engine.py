"""Tests for batched-mode orchestration."""

import asyncio
import time

import pytest

from orchd.context import CallContext, deadline_scope
from orchd.engine import Orchestrator, run
from orchd.models import ModelConfig, Request
from orchd.providers.openai import OpenAIProvider
from orchd.providers.registry import ProviderRegistry, create_default_registry
from tests.stubs import StubProvider


def make_request(*models: tuple[str, str], **kwargs) -> Request:
    return Request(
        prompt=kwargs.pop("prompt", "hi"),
        models=[ModelConfig(name=name, provider=provider, model="x") for name, provider in models],
        **kwargs,
    )


@pytest.mark.asyncio
class TestBatchedRun:
    """Test Orchestrator.run."""

    async def test_no_models_returns_empty_results(self, orchestrator):
        async with deadline_scope(1) as context:
            response = await orchestrator.run(context, make_request())

        assert response.results == []
        assert response.to_json() == '{\n  "results": []\n}'

    async def test_unknown_provider_is_isolated(self, orchestrator):
        request = make_request(("a", "stubok"), ("b", "unknown"), timeout_seconds=1)

        async with deadline_scope(request.effective_timeout()) as context:
            response = await orchestrator.run(context, request)

        assert len(response.results) == 2
        first, second = response.results
        assert first.text == "stub answer"
        assert first.error is None
        assert second.error == "unknown provider: unknown"
        assert second.text is None
        assert second.provider == "unknown"

    async def test_results_follow_request_order_not_completion_order(self):
        registry = ProviderRegistry()
        registry.register("slower", StubProvider(text="slower", delay=0.15))
        registry.register("slow", StubProvider(text="slow", delay=0.05))
        registry.register("fast", StubProvider(text="fast"))
        request = make_request(("one", "slower"), ("two", "fast"), ("three", "slow"), ("four", "nope"))

        async with deadline_scope(5) as context:
            response = await Orchestrator(registry).run(context, request)

        assert [r.name for r in response.results] == [m.name for m in request.models]
        assert [r.text for r in response.results] == ["slower", "fast", "slow", None]

    async def test_provider_error_becomes_result_error(self, orchestrator):
        request = make_request(("bad", "stubfail"), ("good", "stubok"))

        async with deadline_scope(1) as context:
            response = await orchestrator.run(context, request)

        assert response.results[0].error == "stub error: boom"
        assert response.results[0].text is None
        assert response.results[1].text == "stub answer"

    async def test_unexpected_exception_is_isolated(self):
        registry = ProviderRegistry()
        registry.register("broken", StubProvider(error=RuntimeError("kaboom")))
        registry.register("stubok", StubProvider())
        request = make_request(("broken", "broken"), ("ok", "stubok"))

        async with deadline_scope(1) as context:
            response = await Orchestrator(registry).run(context, request)

        assert response.results[0].error == "RuntimeError: kaboom"
        assert response.results[1].text == "stub answer"

    async def test_missing_credential_does_not_abort_siblings(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        registry = ProviderRegistry()
        registry.register("openai", OpenAIProvider())
        registry.register("stubok", StubProvider())
        request = make_request(("gpt", "openai"), ("ok", "stubok"))

        async with deadline_scope(1) as context:
            response = await Orchestrator(registry).run(context, request)

        assert response.results[0].error == "missing OpenAI API key"
        assert response.results[1].text == "stub answer"

    async def test_duplicate_providers_are_independent(self, orchestrator, stub_registry):
        request = make_request(("a", "stubok"), ("b", "stubok"), ("c", "stubok"))

        async with deadline_scope(1) as context:
            response = await orchestrator.run(context, request)

        assert [r.name for r in response.results] == ["a", "b", "c"]
        assert len(stub_registry.resolve("stubok").calls) == 3

    async def test_prompt_and_code_reach_the_provider(self, orchestrator, stub_registry):
        request = Request(
            prompt="explain this",
            code='print("hello")',
            models=[ModelConfig(name="a", provider="stubok", model="x")],
        )

        async with deadline_scope(1) as context:
            await orchestrator.run(context, request)

        config, content = stub_registry.resolve("stubok").calls[0]
        assert config.name == "a"
        assert content == 'explain this\n\n```code\nprint("hello")\n```'

    async def test_models_run_concurrently(self):
        registry = ProviderRegistry()
        registry.register("sleepy", StubProvider(delay=0.3))
        request = make_request(("a", "sleepy"), ("b", "sleepy"), ("c", "sleepy"), ("d", "sleepy"))

        start = time.monotonic()
        async with deadline_scope(5) as context:
            response = await Orchestrator(registry).run(context, request)
        elapsed = time.monotonic() - start

        assert all(r.text == "stub answer" for r in response.results)
        assert elapsed < 0.9

    async def test_identical_requests_give_identical_json(self, orchestrator):
        request = make_request(("a", "stubok"), ("b", "unknown"), ("c", "stubfail"))

        async with deadline_scope(1) as context:
            first = await orchestrator.run(context, request)
        async with deadline_scope(1) as context:
            second = await orchestrator.run(context, request)

        assert first.to_json() == second.to_json()


@pytest.mark.asyncio
class TestDeadline:
    """Test that the shared deadline reaches every in-flight call."""

    async def test_deadline_fails_every_slow_model(self, orchestrator, stub_registry):
        request = make_request(("a", "slow"), ("b", "slow"), ("c", "stubok"))

        start = time.monotonic()
        context = CallContext(0.05)
        try:
            response = await orchestrator.run(context, request)
        finally:
            context.release()
        elapsed = time.monotonic() - start

        assert elapsed < 1
        assert response.results[0].error == "deadline exceeded after 0.05s"
        assert response.results[1].error == "deadline exceeded after 0.05s"
        assert response.results[2].text == "stub answer"
        assert stub_registry.resolve("slow").cancelled == 2

    async def test_cancel_fails_every_in_flight_model(self, orchestrator):
        request = make_request(("a", "slow"), ("b", "slow"))

        async with deadline_scope(30) as context:
            asyncio.get_running_loop().call_later(0.05, context.cancel)
            response = await orchestrator.run(context, request)

        assert [r.error for r in response.results] == ["request cancelled", "request cancelled"]

    async def test_module_run_applies_request_timeout(self, stub_registry):
        request = make_request(("a", "slow"), timeout_seconds=1)

        start = time.monotonic()
        response = await run(request, Orchestrator(stub_registry))

        assert time.monotonic() - start < 3
        assert response.results[0].error == "deadline exceeded after 1s"


class TestDefaultRegistry:
    """Test the bootstrapped registry the engine builds by default."""

    def test_default_orchestrator_registers_builtin_providers(self):
        orchestrator = Orchestrator()

        assert orchestrator.registry.ids() == ["anthropic", "ollama", "openai"]

    def test_injected_registry_is_used_as_is(self):
        registry = ProviderRegistry()
        assert Orchestrator(registry).registry is registry

    def test_create_default_registry_returns_fresh_instances(self):
        assert create_default_registry().resolve("openai") is not create_default_registry().resolve("openai")

