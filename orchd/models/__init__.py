"""Data models shared by the orchestration engine, providers and CLI."""

from orchd.models.request import ModelConfig, Request
from orchd.models.result import ModelResult, Response

__all__ = [
    "ModelConfig",
    "Request",
    "ModelResult",
    "Response",
]
