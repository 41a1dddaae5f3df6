"""orchd Command-Line Interface.

Reads one JSON request on stdin, fans it out to every configured model and
writes the JSON response (or the newline-delimited event stream) on stdout.

Flags:
    - --version: Print version and exit
    - --config: Print the request / model config schema and exit
    - --doctor: Run environment / provider checks and exit
    - --check-request: Validate a request from stdin without calling providers

Per-model failures are reported inside the JSON output and never change the
exit code. Unreadable, empty or malformed input, a failed stream write and a
failed response serialisation exit with status 1.
"""

import asyncio
import sys

import click
from pydantic_core import PydanticSerializationError

from orchd._version import get_version
from orchd.cli.commands import print_config_schema, run_check_request, run_doctor
from orchd.cli.utils import print_error, read_request
from orchd.engine import Orchestrator, run, run_stream
from orchd.exceptions import RequestError, StreamWriteError
from orchd.logging_config import get_logger
from orchd.providers.registry import create_default_registry
from orchd.telemetry import configure_tracing, shutdown_tracing

logger = get_logger(__name__)


def create_orchestrator() -> Orchestrator:
    """Build the engine used by the CLI, with the built-in providers registered."""
    return Orchestrator(create_default_registry())


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-v", "--version", "show_version", is_flag=True, help="Print version and exit.")
@click.option("--config", "show_config", is_flag=True, help="Print the JSON request / model config schema and exit.")
@click.option("--doctor", is_flag=True, help="Run environment / provider checks and exit.")
@click.option(
    "--check-request", is_flag=True, help="Validate a JSON request from stdin and exit (no API calls)."
)
def main(show_version: bool, show_config: bool, doctor: bool, check_request: bool) -> None:
    """orchd - multi-LLM orchestrator.

    Reads a JSON request on stdin and writes a JSON response to stdout.

    \b
    Usage:
      echo '{...}' | orchd
      orchd < request.json

    \b
    JSON request shape (simplified):
      {
        "prompt": "string",
        "code": "string",
        "models": [
          {"name": "sonnet", "provider": "anthropic", "model": "claude-3-5-sonnet-latest",
           "api_key": "...", "endpoint": "...", "temperature": 0.2, "max_tokens": 2048}
        ],
        "timeout_seconds": 30,
        "stream": false
      }
    """
    if show_version:
        click.echo(f"orchd {get_version()}")
        return
    if show_config:
        print_config_schema(create_default_registry())
        return
    if doctor:
        run_doctor(create_default_registry())
        return
    if check_request:
        sys.exit(run_check_request(create_default_registry()))

    try:
        request = read_request()
    except RequestError as e:
        print_error(str(e))
        sys.exit(1)

    configure_tracing()
    orchestrator = create_orchestrator()
    logger.debug(
        f"Dispatching request: models={len(request.models)}, stream={request.stream}, "
        f"timeout={request.effective_timeout()}s"
    )
    try:
        if request.stream:
            try:
                asyncio.run(run_stream(request, sys.stdout, orchestrator))
            except StreamWriteError as e:
                print_error(f"streaming error: {e}")
                sys.exit(1)
            return

        response = asyncio.run(run(request, orchestrator))
        try:
            output = response.to_json()
        except PydanticSerializationError as e:
            print_error(f"failed to marshal response: {e}")
            sys.exit(1)
        click.echo(output)
    finally:
        shutdown_tracing()
