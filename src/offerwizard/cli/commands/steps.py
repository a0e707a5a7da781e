"""``offerwizard steps`` command."""

from __future__ import annotations

import click
from rich.table import Table

from offerwizard.cli.console import console
from offerwizard.cli.context import ExitCode, async_command, get_cli_context
from offerwizard.cli.helpers import read_draft_form_data
from offerwizard.cli.output import (
    FORMAT_CHOICES,
    OutputFormat,
    format_bool,
    format_error,
    format_json,
)
from offerwizard.exceptions import PersistenceError, UnknownStepError
from offerwizard.steps import AccessibilityCalculator, build_offer_registry


@click.command()
@click.option(
    "--draft",
    "draft_path",
    type=click.Path(dir_okay=False, path_type=str),
    default=None,
    help="Draft file whose form data decides visibility.",
)
@click.option(
    "--completed",
    "completed",
    multiple=True,
    help="Step id to treat as completed (repeatable).",
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
async def steps(
    ctx: click.Context, draft_path: str | None, completed: tuple[str, ...], fmt: str
) -> None:
    """List the offer steps with their visibility and accessibility.

    Examples:

        offerwizard steps

        offerwizard steps --draft .offerwizard/draft.json --completed identification

        offerwizard steps --format json
    """
    registry = build_offer_registry()
    try:
        form_data = await read_draft_form_data(
            draft_path, quiet=get_cli_context(ctx).quiet
        )
        for step_id in completed:
            registry.get(step_id)
    except (PersistenceError, UnknownStepError) as e:
        click.echo(format_error(e.message), err=True)
        raise SystemExit(ExitCode.FAILURE) from e

    calculator = AccessibilityCalculator(registry)
    done = frozenset(completed)
    rows = [
        {
            "id": step.id,
            "title": step.title,
            "optional": step.optional,
            "depends_on": list(step.depends_on),
            "visible": calculator.is_visible(step.id, form_data),
            "accessible": calculator.is_accessible(step.id, form_data, done),
            "completed": step.id in done,
        }
        for step in registry
    ]

    if fmt == OutputFormat.JSON:
        click.echo(format_json(rows))
        return

    table = Table(title="Offer steps")
    table.add_column("#", justify="right")
    table.add_column("Step", style="bold")
    table.add_column("Title")
    table.add_column("Optional")
    table.add_column("Depends on")
    table.add_column("Visible")
    table.add_column("Accessible")
    for position, row in enumerate(rows, start=1):
        style = None if row["visible"] else "dim"
        table.add_row(
            str(position),
            row["id"],
            row["title"],
            format_bool(row["optional"]),
            ", ".join(row["depends_on"]) or "-",
            format_bool(row["visible"]),
            format_bool(row["accessible"]),
            style=style,
        )
    console.print(table)
