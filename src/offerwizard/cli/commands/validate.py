"""``offerwizard validate`` command."""

from __future__ import annotations

import click
from rich.table import Table

from offerwizard.cli.console import console
from offerwizard.cli.context import ExitCode, async_command, get_cli_context
from offerwizard.cli.helpers import read_draft_form_data
from offerwizard.cli.output import (
    FORMAT_CHOICES,
    OutputFormat,
    format_error,
    format_json,
    format_success,
)
from offerwizard.exceptions import PersistenceError
from offerwizard.logging import get_logger
from offerwizard.steps import build_offer_registry
from offerwizard.validation import ValidationRunner, default_validation_registry


@click.command()
@click.argument(
    "draft_path",
    metavar="DRAFT",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
)
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(FORMAT_CHOICES),
    default=OutputFormat.TABLE.value,
    help="Output format.",
)
@click.pass_context
@async_command
async def validate(ctx: click.Context, draft_path: str, fmt: str) -> None:
    """Validate the whole form stored in a draft file.

    Exits with status 1 when validation errors are found.

    Examples:

        offerwizard validate .offerwizard/draft.json

        offerwizard validate draft.json --format json
    """
    logger = get_logger(__name__)
    cli_ctx = get_cli_context(ctx)

    try:
        form_data = await read_draft_form_data(draft_path)
    except PersistenceError as e:
        click.echo(
            format_error(e.message, suggestion="Check the file is a saved draft"),
            err=True,
        )
        raise SystemExit(ExitCode.FAILURE) from e

    runner = ValidationRunner(
        default_validation_registry(),
        deduplicate=cli_ctx.config.validation.deduplicate,
    )
    result = await runner.validate_all(form_data)
    logger.info("draft_validated", path=draft_path, errors=len(result.errors))

    steps = build_offer_registry()

    def owning_step(section: str) -> str | None:
        step = steps.step_for_section(section)
        return step.id if step is not None else None

    if fmt == OutputFormat.JSON:
        payload = result.to_dict()
        for error in payload["errors"]:
            error["step"] = owning_step(error["section"])
        click.echo(format_json(payload))
    elif result.is_valid:
        if not cli_ctx.quiet:
            console.print(format_success(f"{draft_path} is valid"))
    else:
        table = Table(title=f"Validation errors in {draft_path}")
        table.add_column("Step", style="bold")
        table.add_column("Section")
        table.add_column("Field")
        table.add_column("Message", style="red")
        for section, errors in result.by_section().items():
            for error in errors:
                table.add_row(
                    owning_step(section) or "-", section, error.field, error.message
                )
        console.print(table)

    if not result.is_valid:
        raise SystemExit(ExitCode.FAILURE)
