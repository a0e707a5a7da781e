"""Text helpers for command output."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

__all__ = [
    "OutputFormat",
    "FORMAT_CHOICES",
    "format_error",
    "format_success",
    "format_warning",
    "format_json",
    "format_bool",
]


class OutputFormat(str, Enum):
    """Values accepted by ``--format``."""

    TABLE = "table"
    JSON = "json"


FORMAT_CHOICES = [fmt.value for fmt in OutputFormat]


def format_error(message: str, suggestion: str | None = None) -> str:
    """Build an error line, optionally followed by a hint.

    Example:
        >>> print(format_error("Draft is not JSON", suggestion="Re-save the draft"))
        Error: Draft is not JSON
        Suggestion: Re-save the draft
    """
    if suggestion:
        return f"Error: {message}\nSuggestion: {suggestion}"
    return f"Error: {message}"


def format_success(message: str) -> str:
    return f"[green]OK[/green] {message}"


def format_warning(message: str) -> str:
    return f"[yellow]Warning:[/yellow] {message}"


def format_json(data: Any) -> str:
    """Indented JSON; datetimes and paths become strings."""
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def format_bool(value: bool) -> str:
    return "yes" if value else "no"
