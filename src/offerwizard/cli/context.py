"""Per-invocation state shared by the root group and its commands."""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import click

from offerwizard.config import OfferWizardConfig

__all__ = [
    "ExitCode",
    "CLIContext",
    "async_command",
    "get_cli_context",
]

P = ParamSpec("P")
R = TypeVar("R")


class ExitCode(IntEnum):
    """Process exit statuses.

    A draft with validation errors counts as a failure, so scripts can
    gate on ``offerwizard validate``.
    """

    SUCCESS = 0
    FAILURE = 1
    INTERRUPTED = 130


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Options given to the root group.

    Attributes:
        config: Merged configuration.
        config_path: Explicit ``--config`` file, if one was given.
        verbosity: Number of ``-v`` flags.
        quiet: ``--quiet`` was given; commands skip informational lines.
    """

    config: OfferWizardConfig
    config_path: Path | None = None
    verbosity: int = 0
    quiet: bool = False


def get_cli_context(ctx: click.Context) -> CLIContext:
    """Return the CLIContext stored by the root group.

    A command run on its own (outside ``cli``) gets defaults.
    """
    stored = (ctx.find_object(dict) or {}).get("cli_ctx")
    return stored if stored is not None else CLIContext(config=OfferWizardConfig())


def async_command(f: Callable[P, Coroutine[Any, Any, R]]) -> Callable[P, R]:
    """Let click call a coroutine command.

    Ctrl-C exits with ``ExitCode.INTERRUPTED`` instead of a traceback.
    """

    @functools.wraps(f)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return asyncio.run(f(*args, **kwargs))
        except KeyboardInterrupt:
            click.echo("Interrupted", err=True)
            raise SystemExit(ExitCode.INTERRUPTED) from None

    return wrapper
