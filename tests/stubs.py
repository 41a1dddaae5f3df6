"""Test doubles shared across the orchd test suite."""

import asyncio
from typing import Any

from orchd.models.request import ModelConfig
from orchd.providers._base import Provider, build_content


class StubProvider(Provider):
    """Deterministic provider that never touches the network."""

    name = "stub"

    def __init__(self, text: str = "stub answer", delay: float = 0.0, error: Exception | None = None):
        super().__init__()
        self.text = text
        self.delay = delay
        self.error = error
        self.calls: list[tuple[ModelConfig, str]] = []
        self.cancelled = 0

    def build_payload(self, config: ModelConfig, content: str) -> dict[str, Any]:
        return {"content": content}

    def parse_response(self, data: dict[str, Any]) -> str:
        return data["content"]

    async def call(self, context, config, prompt, code):
        self.calls.append((config, build_content(prompt, code)))
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        if self.error is not None:
            raise self.error
        return self.text
