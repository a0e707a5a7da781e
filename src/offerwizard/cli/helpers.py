"""Helpers shared by CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from offerwizard.cli.console import err_console
from offerwizard.cli.output import format_warning
from offerwizard.store import FileDraftStore

__all__ = ["read_draft_form_data"]


async def read_draft_form_data(
    path: Path | str | None, *, quiet: bool = False
) -> dict[str, Any]:
    """Read the form data of a draft file.

    Returns an empty form when ``path`` is None or the file is missing;
    the latter is reported on stderr unless ``quiet``.

    Raises:
        PersistenceError: If the file exists but is not a valid draft.
    """
    if path is None:
        return {}
    snapshot = await FileDraftStore(path).load()
    if snapshot is None:
        if not quiet:
            err_console.print(format_warning(f"No draft at {path}, using an empty form"))
        return {}
    return snapshot.form_data
