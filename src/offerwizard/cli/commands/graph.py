"""``offerwizard graph`` command."""

from __future__ import annotations

import click
from rich.table import Table

from offerwizard.cli.console import console
from offerwizard.cli.output import FORMAT_CHOICES, OutputFormat, format_json
from offerwizard.steps import build_offer_registry


@click.command()
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(FORMAT_CHOICES),
    default=OutputFormat.TABLE.value,
    help="Output format.",
)
def graph(fmt: str) -> None:
    """Show the step dependency order and visibility rules.

    Steps are listed so that every step comes after the steps it
    depends on.
    """
    registry = build_offer_registry()
    rows = []
    for step_id in registry.topological_order():
        step = registry.get(step_id)
        rows.append(
            {
                "id": step.id,
                "depends_on": list(step.depends_on),
                "dependents": list(registry.dependents(step.id)),
                "visible_when": (
                    step.visibility.describe() if step.visibility is not None else None
                ),
            }
        )

    if fmt == OutputFormat.JSON:
        click.echo(format_json(rows))
        return

    table = Table(title="Step dependency order")
    table.add_column("Step", style="bold")
    table.add_column("Depends on")
    table.add_column("Visible when")
    for row in rows:
        table.add_row(
            row["id"],
            ", ".join(row["depends_on"]) or "-",
            row["visible_when"] or "always",
        )
    console.print(table)
