"""Shared helpers for the orchd CLI."""

import sys
from typing import TextIO

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from orchd.exceptions import RequestError
from orchd.models.request import Request

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def print_error(message: str) -> None:
    """Print one diagnostic line on stderr."""
    err_console.print(f"[red]{escape(message)}[/red]")


def read_request(stream: TextIO | None = None, prefix: str = "") -> Request:
    """Read and parse the whole request document from ``stream`` (stdin by default).

    Args:
        stream: Text stream to read from
        prefix: Optional tag prepended to error messages, e.g. "[check-request] "

    Raises:
        RequestError: If the input cannot be read, is empty or is not a valid request
    """
    stream = stream if stream is not None else sys.stdin
    try:
        data = stream.read()
    except (OSError, UnicodeDecodeError) as e:
        raise RequestError(f"{prefix}failed to read stdin: {e}") from e

    if not data:
        raise RequestError(f"{prefix}no input provided on stdin (see --help for usage)")

    try:
        return Request.model_validate_json(data)
    except ValidationError as e:
        raise RequestError(f"{prefix}invalid JSON input: {_summarize(e)}") from e


def _summarize(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"{location}: {first['msg']}"
    return first["msg"]
