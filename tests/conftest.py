"""Pytest configuration for orchd tests."""

import pytest

from orchd.engine import Orchestrator
from orchd.exceptions import ProviderResponseError
from orchd.providers.registry import ProviderRegistry
from tests.stubs import StubProvider


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset global settings after each test to ensure test isolation."""
    yield
    from orchd.config import reload_settings

    reload_settings()


@pytest.fixture
def stub_registry():
    """Registry with a succeeding, a failing and a slow stub provider."""
    registry = ProviderRegistry()
    registry.register("stubok", StubProvider(text="stub answer"))
    registry.register("stubfail", StubProvider(error=ProviderResponseError("stub error: boom")))
    registry.register("slow", StubProvider(text="slow answer", delay=10))
    return registry


@pytest.fixture
def orchestrator(stub_registry):
    return Orchestrator(stub_registry)
