"""Result models for orchd."""

from pydantic import BaseModel, ConfigDict, Field

from orchd.models.request import ModelConfig


class ModelResult(BaseModel):
    """Outcome of one configured model's invocation.

    Exactly one of ``text`` and ``error`` is set. ``name`` and ``provider`` are
    copied from the originating ModelConfig so a result stays self-describing
    when it arrives out of order.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Label of the originating model configuration")
    provider: str = Field(description="Provider id of the originating model configuration")
    text: str | None = Field(default=None, description="Answer text on success")
    error: str | None = Field(default=None, description="Human-readable message on failure")

    @classmethod
    def success(cls, config: ModelConfig, text: str) -> "ModelResult":
        return cls(name=config.name, provider=config.provider, text=text)

    @classmethod
    def failure(cls, config: ModelConfig, error: str) -> "ModelResult":
        return cls(name=config.name, provider=config.provider, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None


class Response(BaseModel):
    """Batched-mode output, index-aligned with the request's model list."""

    model_config = ConfigDict(frozen=True)

    results: list[ModelResult] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialise as the pretty-printed document written to stdout."""
        return self.model_dump_json(indent=2, exclude_none=True)
