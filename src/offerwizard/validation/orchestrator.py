"""Validation orchestrator: debouncing, aggregation and error merging.

Edits call ``trigger()``; after the quiet period a single pass runs on
the latest snapshot and its errors are written to an error sink (the
form data store). In section mode only the edited sections are
re-validated and only their entries in the error map are replaced. In
full mode the whole form is validated and the map is replaced.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any, Literal, Protocol

from offerwizard.logging import get_logger
from offerwizard.utils.debounce import Debouncer
from offerwizard.validation.models import ValidationResult, to_error_map
from offerwizard.validation.runner import ValidationRunner

__all__ = ["ValidationErrorSink", "ValidationOrchestrator", "ValidationMode"]

logger = get_logger(__name__)

ValidationMode = Literal["section", "full"]
FormData = Mapping[str, Any]


class ValidationErrorSink(Protocol):
    """Receiver of aggregated validation errors."""

    def set_validation_errors(
        self, section: str, errors: Mapping[str, str]
    ) -> None: ...

    def replace_validation_errors(
        self, errors: Mapping[str, Mapping[str, str]]
    ) -> None: ...


class ValidationOrchestrator:
    """Debounced validation passes over form data snapshots.

    Args:
        runner: Runs the registered validators.
        sink: Receives the aggregated errors of every pass that was not
            superseded.
        debounce_seconds: Quiet period after the last trigger.
        mode: "section" (merge per edited section) or "full" (replace all).

    Example:
        ```python
        orchestrator = ValidationOrchestrator(runner, store, debounce_seconds=0.3)
        orchestrator.trigger(store.snapshot(), "identification")
        orchestrator.trigger(store.snapshot(), "identification")
        await orchestrator.wait()  # exactly one pass, latest snapshot
        ```
    """

    def __init__(
        self,
        runner: ValidationRunner,
        sink: ValidationErrorSink,
        *,
        debounce_seconds: float = 0.3,
        mode: ValidationMode = "section",
    ) -> None:
        self.runner = runner
        self.mode = mode
        self._sink = sink
        self._debouncer = Debouncer(
            debounce_seconds, self._run_pass, name="validation"
        )
        self._latest: FormData = {}
        self._pending_sections: set[str] = set()
        self._full_pending = False
        self._validating = False
        self._passes = 0
        self._last_result: ValidationResult | None = None

    # ------------------------------------------------------------------
    # Direct validation (no debounce, no writes)
    # ------------------------------------------------------------------

    async def validate_section(
        self, section: str, section_data: Any, form_data: FormData
    ) -> ValidationResult:
        return await self.runner.validate_section(section, section_data, form_data)

    async def validate_all(self, form_data: FormData) -> ValidationResult:
        return await self.runner.validate_all(form_data)

    # ------------------------------------------------------------------
    # Immediate pass with writes
    # ------------------------------------------------------------------

    async def run_now(
        self, form_data: FormData, sections: Collection[str] | None = None
    ) -> ValidationResult:
        """Validate immediately and write the errors to the sink.

        A debounced pass covering the same sections is superseded, since
        its snapshot is older than ``form_data``. Other touched sections
        stay pending and are re-scheduled on ``form_data``.

        Args:
            form_data: Snapshot to validate.
            sections: Sections to re-validate and merge, or None for a
                whole-form pass that replaces the error map.
        """
        self._supersede_pending(form_data, sections)
        result = await self._validate(form_data, sections)
        self._apply(result, sections)
        return result

    # ------------------------------------------------------------------
    # Debounced passes
    # ------------------------------------------------------------------

    def trigger(self, form_data: FormData, section: str | None = None) -> bool:
        """Schedule a debounced pass on ``form_data``.

        Supersedes any pass that is waiting or running. Sections touched
        since the last applied pass accumulate, so a burst of edits over
        several sections is validated in one pass.

        Returns:
            False when no event loop is running and nothing was scheduled.
        """
        self._latest = form_data
        if self.mode == "full" or section is None:
            self._full_pending = True
        else:
            self._pending_sections.add(section)
        return self._debouncer.trigger()

    def cancel(self) -> None:
        """Drop the pending pass and forget the touched sections."""
        self._debouncer.cancel()
        self._pending_sections.clear()
        self._full_pending = False

    async def flush(self) -> ValidationResult | None:
        """Run the pending pass now and return its result."""
        await self._debouncer.flush()
        return self._last_result

    async def wait(self) -> ValidationResult | None:
        """Wait for the pending pass to finish on its own schedule."""
        await self._debouncer.wait()
        return self._last_result

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    @property
    def is_validating(self) -> bool:
        return self._validating

    @property
    def passes(self) -> int:
        """Number of debounced passes whose results were applied."""
        return self._passes

    @property
    def last_result(self) -> ValidationResult | None:
        return self._last_result

    async def _run_pass(self, generation: int) -> None:
        form_data = self._latest
        sections = None if self._full_pending else frozenset(self._pending_sections)
        self._validating = True
        try:
            result = await self._validate(form_data, sections)
        finally:
            self._validating = False

        if not self._debouncer.is_current(generation):
            logger.debug("validation_pass_superseded", generation=generation)
            return

        self._pending_sections.clear()
        self._full_pending = False
        self._apply(result, sections)
        self._passes += 1
        self._last_result = result
        logger.debug(
            "validation_pass_applied",
            generation=generation,
            errors=len(result.errors),
            sections=sorted(sections) if sections is not None else "all",
        )

    def _supersede_pending(
        self, form_data: FormData, sections: Collection[str] | None
    ) -> None:
        if sections is None:
            self.cancel()
            return
        self._pending_sections.difference_update(sections)
        if not (self._full_pending or self._pending_sections):
            self._debouncer.cancel()
            return
        # The remaining sections are validated on the newer snapshot
        self._latest = form_data
        if self._debouncer.pending:
            self._debouncer.trigger()

    async def _validate(
        self, form_data: FormData, sections: Collection[str] | None
    ) -> ValidationResult:
        if sections is None:
            return await self.runner.validate_all(form_data)
        return await self.runner.validate_sections(sorted(sections), form_data)

    def _apply(
        self, result: ValidationResult, sections: Collection[str] | None
    ) -> None:
        error_map = to_error_map(result.errors)
        if sections is None:
            self._sink.replace_validation_errors(error_map)
            return
        for section in sorted(sections):
            self._sink.set_validation_errors(section, error_map.get(section, {}))
