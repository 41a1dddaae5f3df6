"""CLI actions for orchd."""

from orchd.cli.commands.diagnostics import print_config_schema, run_check_request, run_doctor, validate_request

__all__ = ["print_config_schema", "run_check_request", "run_doctor", "validate_request"]
