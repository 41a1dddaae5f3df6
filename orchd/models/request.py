"""Request models for orchd.

A Request carries one prompt, an optional code excerpt and the ordered list of
ModelConfig entries it should be fanned out to. Both models are frozen: once a
request is handed to the engine nothing mutates it.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from orchd.config import get_settings


class ModelConfig(BaseModel):
    """One requested backend invocation.

    Attributes:
        name: Caller-facing label, copied onto the result
        provider: Provider id used to resolve a capability from the registry
        model: Provider-specific model identifier
        api_key: Optional credential override; the provider env var is used otherwise
        endpoint: Optional endpoint override; the provider default is used otherwise
        temperature: Sampling temperature; unset or zero means provider default
        max_tokens: Answer length limit; unset or non-positive means provider default

    Example:
        >>> ModelConfig(name="sonnet", provider="anthropic", model="claude-3-5-sonnet-latest")
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str = Field(default="", description="Caller-facing label")
    provider: str = Field(default="", description="Provider id")
    model: str = Field(default="", description="Provider-specific model id")
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("api_key", "apiKey"),
        description="Optional API key override",
    )
    endpoint: str | None = Field(default=None, description="Optional endpoint override")
    temperature: float | None = Field(default=None, description="Sampling temperature")
    max_tokens: int | None = Field(
        default=None,
        validation_alias=AliasChoices("max_tokens", "maxTokens"),
        description="Maximum tokens in the answer",
    )

    def effective_temperature(self) -> float | None:
        """Return the temperature to send, or None to leave the provider default."""
        if self.temperature is not None and self.temperature > 0:
            return self.temperature
        return None

    def effective_max_tokens(self, default: int | None = None) -> int | None:
        """Return the max tokens to send, falling back to ``default`` when unset or non-positive."""
        if self.max_tokens is not None and self.max_tokens > 0:
            return self.max_tokens
        return default


class Request(BaseModel):
    """The unit of work submitted to the orchestration engine.

    Attributes:
        prompt: Instruction text, may be empty
        code: Code excerpt appended as a fenced block when non-empty
        models: Ordered model configurations; order defines batched result order
        timeout_seconds: Overall deadline; <= 0 applies the configured default
        stream: Select streaming mode instead of batched mode
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    prompt: str = ""
    code: str = ""
    models: tuple[ModelConfig, ...] = ()
    timeout_seconds: int = Field(
        default=0,
        validation_alias=AliasChoices("timeout_seconds", "timeoutSeconds"),
    )
    stream: bool = False

    @field_validator("prompt", "code", "models", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        # JSON null is accepted for the optional parts of the document
        if value is None:
            return () if info.field_name == "models" else ""
        return value

    def effective_timeout(self) -> int:
        """Return the deadline in seconds, applying the default when not positive."""
        if self.timeout_seconds > 0:
            return self.timeout_seconds
        return get_settings().default_timeout_seconds
