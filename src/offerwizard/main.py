"""``offerwizard`` command group."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from offerwizard import __version__
from offerwizard.cli.commands.graph import graph
from offerwizard.cli.commands.steps import steps
from offerwizard.cli.commands.validate import validate
from offerwizard.cli.context import CLIContext, ExitCode
from offerwizard.cli.output import format_error
from offerwizard.config import OfferWizardConfig, load_config
from offerwizard.exceptions import ConfigError
from offerwizard.logging import configure_logging


def _log_level(config: OfferWizardConfig, verbose: int, quiet: bool) -> int:
    # --quiet beats -v, which beats the configured verbosity
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.INFO if verbose == 1 else logging.DEBUG
    return logging.getLevelName(config.verbosity.upper())


def _describe_config_error(error: ConfigError) -> str:
    details = []
    if error.field:
        details.append(f"Field: {error.field}")
    if error.value is not None:
        details.append(f"Value: {error.value!r}")
    message = "\n  ".join([error.message, *details])
    return format_error(message, suggestion="Fix offerwizard.yaml or OFFERWIZARD_* variables")


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="offerwizard")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of ./offerwizard.yaml.",
)
@click.option("-v", "--verbose", count=True, help="-v for INFO logs, -vv for DEBUG.")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors; skip info lines.")
@click.pass_context
def cli(ctx: click.Context, config_file: Path | None, verbose: int, quiet: bool) -> None:
    """Inspect the offer wizard's steps and validate saved drafts."""
    ctx.ensure_object(dict)
    try:
        config = load_config(config_file)
    except ConfigError as e:
        # Logging is not configured yet
        click.echo(_describe_config_error(e), err=True)
        ctx.exit(ExitCode.FAILURE)

    configure_logging(level=_log_level(config, verbose, quiet))
    ctx.obj["cli_ctx"] = CLIContext(
        config=config, config_path=config_file, verbosity=verbose, quiet=quiet
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(steps)
cli.add_command(graph)
cli.add_command(validate)


if __name__ == "__main__":
    cli()
