"""Rich consoles used by the commands.

Rich drops styling on its own when output is not a terminal.
"""

from __future__ import annotations

from rich.console import Console

__all__ = ["console", "err_console"]

console = Console()
err_console = Console(stderr=True)
