"""Diagnostic CLI actions: config schema, environment doctor and request checks.

None of these call a provider.
"""

import os

import click

from orchd._version import get_version
from orchd.cli.utils import console, print_error, read_request
from orchd.config import get_settings
from orchd.exceptions import RequestError
from orchd.models.request import Request
from orchd.providers.registry import ProviderRegistry

CONFIG_SCHEMA = """orchd configuration schema

orchd expects a JSON document on stdin.

ModelConfig (per model):
{
  "name":        "short caller-facing label (e.g. 'sonnet')",
  "provider":    "provider id (e.g. 'anthropic', 'openai', 'ollama')",
  "model":       "provider-specific model id (e.g. 'claude-3-5-sonnet-latest', 'gpt-4.1')",

  "api_key":     "optional; API key override. If omitted, read from the provider env var",
  "endpoint":    "optional; API endpoint override. Provider default is used if omitted",

  "temperature": 0.0,
  "max_tokens":  0
}

Request:
{
  "prompt":          "string prompt (high-level instruction)",
  "code":            "string containing the code snippet / buffer contents",
  "models":          [ ModelConfig, ... ],
  "timeout_seconds": 30,
  "stream":          false
}

timeout_seconds <= 0 applies the default ({default_timeout}s). temperature 0 and
max_tokens <= 0 leave the provider default in place.

Notes about providers:
{provider_notes}
Output:
- stream = false: one JSON document {"results": [{name, provider, text | error}, ...]}
  with results in the same order as "models".
- stream = true:  one JSON object per line, {"event": "result", ...} per model in
  completion order, then a single {"event": "done"}.
"""


def provider_notes(registry: ProviderRegistry) -> str:
    lines = []
    for provider_id in registry:
        provider = registry.resolve(provider_id)
        lines.append(f'- provider = "{provider_id}"')
        lines.append(f"  - Default endpoint: {provider.default_endpoint}")
        if provider.env_var:
            lines.append(f"  - API key:   env {provider.env_var} (or ModelConfig.api_key)")
        else:
            lines.append("  - No API key used.")
        lines.append("")
    return "\n".join(lines)


def print_config_schema(registry: ProviderRegistry) -> None:
    """Print the request / model config schema and provider notes."""
    notes = provider_notes(registry)
    click.echo(
        CONFIG_SCHEMA.replace("{default_timeout}", str(get_settings().default_timeout_seconds))
        .replace("{provider_notes}", notes)
    )


def run_doctor(registry: ProviderRegistry) -> None:
    """Report provider credential environment variables and effective settings."""
    settings = get_settings()
    console.print("[bold]orchd doctor[/bold]")
    console.print(f"Version: {get_version()}")
    console.print()

    console.print("Environment / provider checks:")
    for provider_id in registry:
        provider = registry.resolve(provider_id)
        if not provider.env_var:
            console.print(
                f"  [cyan]\\[INFO][/cyan] {provider.label or provider_id}: no credential required; "
                f"default endpoint {provider.default_endpoint}"
            )
        elif os.environ.get(provider.env_var):
            console.print(f"  [green]\\[OK][/green]   {provider.label or provider_id}: {provider.env_var} is set")
        else:
            console.print(
                f"  [yellow]\\[WARN][/yellow] {provider.label or provider_id}: {provider.env_var} is NOT set "
                f'(required for provider="{provider_id}" unless api_key is set per-model)'
            )

    console.print()
    console.print("Settings:")
    console.print(f"  default_timeout_seconds: {settings.default_timeout_seconds}")
    console.print(f"  http_timeout_seconds:    {settings.http_timeout_seconds:g}")
    console.print(f"  log_level:               {settings.log_level}")
    console.print(f"  log_dir:                 {settings.log_dir or '(file logging off)'}")
    console.print(f"  enable_tracing:          {settings.enable_tracing}")
    console.print()
    console.print("If requests still fail, compare your model definitions with `orchd --config`.")


def validate_request(request: Request, registry: ProviderRegistry) -> list[str]:
    """Return the list of problems found in ``request``; empty when it looks valid."""
    issues: list[str] = []

    if not request.models:
        issues.append("no models configured (models array is empty)")

    for i, model in enumerate(request.models):
        prefix = f"models[{i}]"
        if not model.name:
            issues.append(f"{prefix}.name is empty")
        if not model.provider:
            issues.append(f"{prefix}.provider is empty")
        elif model.provider not in registry:
            issues.append(f"{prefix}.provider {model.provider!r} is not a known provider")
        if not model.model:
            issues.append(f"{prefix}.model is empty")

    if request.timeout_seconds < 0:
        issues.append("timeout_seconds is negative")

    return issues


def run_check_request(registry: ProviderRegistry) -> int:
    """Validate the request on stdin without calling any provider.

    Returns:
        int: Process exit code
    """
    try:
        request = read_request(prefix="[check-request] ")
    except RequestError as e:
        print_error(str(e))
        return 1

    issues = validate_request(request, registry)
    if issues:
        click.echo("Request is NOT valid:")
        for issue in issues:
            click.echo(f"  - {issue}")
        return 1

    click.echo("Request looks valid.")
    click.echo(f"  prompt length: {len(request.prompt)}")
    click.echo(f"  code length:   {len(request.code)}")
    click.echo(f"  models:        {len(request.models)}")
    for i, model in enumerate(request.models):
        click.echo(f"    [{i}] name={model.name!r} provider={model.provider!r} model={model.model!r}")
    if request.timeout_seconds > 0:
        click.echo(f"  timeout_seconds: {request.timeout_seconds}")
    else:
        click.echo(f"  timeout_seconds: (not set, default will be {get_settings().default_timeout_seconds})")
    click.echo(f"  stream:          {str(request.stream).lower()}")
    return 0
