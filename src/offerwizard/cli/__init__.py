"""Command-line interface for the offer wizard."""

from __future__ import annotations

from offerwizard.cli.context import CLIContext, ExitCode, async_command, get_cli_context
from offerwizard.cli.output import OutputFormat

__all__ = [
    "CLIContext",
    "ExitCode",
    "OutputFormat",
    "async_command",
    "get_cli_context",
]
