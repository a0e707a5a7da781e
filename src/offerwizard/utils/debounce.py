"""Cancellable, generation-tracked debouncing on top of asyncio.

Each ``trigger()`` cancels whatever is pending or running and starts a
fresh quiet period. The action receives the generation number it was
started for; before publishing anything it must check ``is_current()``,
because a run that has been superseded must never write results.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from offerwizard.logging import get_logger

__all__ = ["Debouncer", "DebouncedAction"]

logger = get_logger(__name__)

DebouncedAction = Callable[[int], Awaitable[None]]


class Debouncer:
    """Collapse bursts of triggers into one run of ``action``.

    Args:
        delay: Quiet period in seconds between the last trigger and the run.
        action: Coroutine function called with the run's generation.
        name: Used in log messages.

    Example:
        ```python
        async def save(generation: int) -> None:
            data = await build()
            if debouncer.is_current(generation):
                publish(data)

        debouncer = Debouncer(0.3, save, name="autosave")
        debouncer.trigger()
        debouncer.trigger()  # cancels the first, one run happens
        await debouncer.wait()
        ```
    """

    def __init__(
        self,
        delay: float,
        action: DebouncedAction,
        *,
        name: str = "debouncer",
    ) -> None:
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self.delay = delay
        self.name = name
        self._action = action
        self._generation = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        """True while a run is scheduled or executing."""
        return self._task is not None and not self._task.done()

    def is_current(self, generation: int) -> bool:
        """True if no trigger, flush or cancel happened since ``generation``."""
        return generation == self._generation

    def trigger(self) -> bool:
        """Start a new quiet period, superseding any pending run.

        Returns:
            False when there is no running event loop (nothing scheduled).
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("debounce_skipped_no_loop", name=self.name)
            return False
        self._supersede()
        self._task = loop.create_task(self._run(self._generation, self.delay))
        return True

    def cancel(self) -> None:
        """Drop any pending or running pass without replacement."""
        if self.pending:
            logger.debug("debounce_cancelled", name=self.name)
        self._supersede()
        self._task = None

    async def flush(self) -> None:
        """Run a pending pass immediately instead of waiting for the delay.

        Does nothing when nothing is pending.
        """
        if not self.pending:
            return
        self._supersede()
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation, 0)
        )
        await self.wait()

    async def wait(self) -> None:
        """Wait until no run is scheduled or executing.

        A run superseded while waiting is replaced by its successor, which
        is waited for too.
        """
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    def _supersede(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _run(self, generation: int, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        if not self.is_current(generation):
            return
        try:
            await self._action(generation)
        except Exception:
            logger.exception("debounced_action_failed", name=self.name)
