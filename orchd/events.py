"""Streaming events for orchd.

In streaming mode the engine emits one ``result`` event per completed model,
in completion order, followed by exactly one ``done`` event. Each event is
written to the sink as one line of JSON:

    {"event":"result","name":"a","provider":"openai","text":"..."}
    {"event":"result","name":"b","provider":"ollama","error":"..."}
    {"event":"done"}
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from orchd.models.result import ModelResult

StreamEventKind = Literal["result", "done"]


class StreamEvent(BaseModel):
    """A single streaming-mode output unit.

    Use the ``event`` field to discriminate; the result fields are populated
    only for ``result`` events.
    """

    model_config = ConfigDict(frozen=True)

    event: StreamEventKind = Field(description="Event type discriminator")
    name: str | None = Field(default=None, description="Model label (result only)")
    provider: str | None = Field(default=None, description="Provider id (result only)")
    text: str | None = Field(default=None, description="Answer text (successful result only)")
    error: str | None = Field(default=None, description="Error message (failed result only)")

    @classmethod
    def result(cls, result: ModelResult) -> "StreamEvent":
        return cls(event="result", **result.model_dump())

    @classmethod
    def done(cls) -> "StreamEvent":
        return cls(event="done")

    def to_model_result(self) -> ModelResult | None:
        """Return the carried ModelResult, or None for the ``done`` event."""
        if self.event != "result":
            return None
        return ModelResult(name=self.name or "", provider=self.provider or "", text=self.text, error=self.error)

    def to_line(self) -> str:
        """Serialise as one newline-terminated JSON line."""
        return self.model_dump_json(exclude_none=True) + "\n"
