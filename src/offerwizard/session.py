"""Wizard session: the entry point a rendering layer talks to.

A session owns one of each collaborator and wires them together:

- a ``FormDataStore`` holding form data, validation errors and drafts;
- a ``StepperStateMachine`` holding the current and completed steps;
- a ``ValidationOrchestrator`` running debounced validation passes;
- an autosave debouncer writing drafts after a quiet period.

Runtime refusals (navigation denial, failed validation, failed save) come
back as result values. Configuration mistakes and unknown step ids raise.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import TracebackType
from typing import Any

from offerwizard.config import OfferWizardConfig
from offerwizard.events import EventBus, EventListener
from offerwizard.exceptions import NavigationDeniedError
from offerwizard.logging import get_logger
from offerwizard.stepper import StepperStateMachine
from offerwizard.steps import AccessibilityCalculator, StepRegistry, build_offer_registry
from offerwizard.store import DraftSaveResult, DraftStore, FormDataStore
from offerwizard.store.form_data import Clock
from offerwizard.utils.debounce import Debouncer
from offerwizard.validation import (
    ValidationError,
    ValidationOrchestrator,
    ValidationRegistry,
    ValidationResult,
    ValidationRunner,
    default_validation_registry,
)

__all__ = ["WizardSession", "NavigationResult", "SubmitResult"]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class NavigationResult:
    """Outcome of a navigation request.

    Attributes:
        allowed: Whether the request was accepted.
        step_id: Current step after the request.
        reason: Denial reason code when refused.
        message: Human-readable denial message when refused.
        at_end: True when ``advance()`` was called on the last visible step.
    """

    allowed: bool
    step_id: str
    reason: str | None = None
    message: str | None = None
    at_end: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "step_id": self.step_id,
            "reason": self.reason,
            "message": self.message,
            "at_end": self.at_end,
        }


@dataclass(frozen=True, slots=True)
class SubmitResult:
    """Outcome of submitting the current step.

    Attributes:
        step_id: The step that was submitted.
        valid: Whether the step's section passed validation.
        completed: Whether the step is in the completed set afterwards.
        errors: Errors found for the step's section.
        navigation: Result of the follow-up ``advance()``, when attempted.
        finished: Whether the wizard is finished after the submit.
    """

    step_id: str
    valid: bool
    completed: bool
    errors: tuple[ValidationError, ...] = ()
    navigation: NavigationResult | None = None
    finished: bool = False


class WizardSession:
    """One user's pass through the wizard.

    Args:
        registry: Step catalogue. Defaults to the offer catalogue.
        validation: Validators. Defaults to the offer validators when the
            offer catalogue is used, otherwise to an empty registry.
        draft_store: Persistence for drafts. Without one, drafts are not
            written and autosave is off.
        config: Settings. Defaults to ``OfferWizardConfig()``.
        session_id: Identifier bound to every log line of the session.
        clock: Source of draft timestamps.

    Example:
        ```python
        async with WizardSession(draft_store=FileDraftStore("draft.json")) as session:
            session.update_form_data("identification", {"PIVA_UTENTE": "..."})
            result = await session.submit_step()
            if not result.valid:
                print(session.validation_errors("identification"))
        ```
    """

    def __init__(
        self,
        registry: StepRegistry | None = None,
        *,
        validation: ValidationRegistry | None = None,
        draft_store: DraftStore | None = None,
        config: OfferWizardConfig | None = None,
        session_id: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        if validation is None:
            validation = (
                default_validation_registry() if registry is None else ValidationRegistry()
            )
        self.registry = registry if registry is not None else build_offer_registry()
        self.config = config if config is not None else OfferWizardConfig()
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self._log = logger.bind(session_id=self.session_id)

        self.events = EventBus()
        self.store = FormDataStore(draft_store, events=self.events, clock=clock)
        self.calculator = AccessibilityCalculator(self.registry)
        self.stepper = StepperStateMachine(
            self.calculator, self.store.snapshot, self.events
        )
        self.validator = ValidationOrchestrator(
            ValidationRunner(validation, deduplicate=self.config.validation.deduplicate),
            self.store,
            debounce_seconds=self.config.validation.debounce_seconds,
            mode=self.config.validation.mode,
        )
        self._autosaver = Debouncer(
            self.config.drafts.autosave_delay_seconds, self._autosave, name="autosave"
        )
        self._log.debug(
            "session_created",
            steps=len(self.registry),
            autosave=self.autosave_enabled,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current_step(self) -> str:
        return self.stepper.current

    @property
    def current_section(self) -> str:
        """Form data section key of the current step."""
        return self.registry.get(self.stepper.current).section

    @property
    def is_dirty(self) -> bool:
        return self.store.is_dirty

    @property
    def last_saved_at(self) -> datetime | None:
        return self.store.last_saved_at

    @property
    def autosave_enabled(self) -> bool:
        return self.store.persistence is not None and self.config.drafts.autosave

    def visible_steps(self) -> tuple[str, ...]:
        return self.stepper.visible_steps()

    def accessible_steps(self) -> tuple[str, ...]:
        return self.stepper.accessible_steps()

    def is_step_visible(self, step_id: str) -> bool:
        return self.stepper.is_visible(step_id)

    def is_step_accessible(self, step_id: str) -> bool:
        return self.stepper.is_accessible(step_id)

    def completed_steps(self) -> frozenset[str]:
        return self.stepper.completed

    def validation_errors(self, section: str | None = None) -> dict[str, Any]:
        return self.store.validation_errors(section)

    def form_data(self) -> dict[str, Any]:
        return self.store.snapshot()

    def is_finished(self) -> bool:
        """True when the last visible step is current and completed."""
        return self.stepper.is_finished()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_form_data(self, section: str, data: Any) -> None:
        """Merge ``data`` into ``section`` and react to the change.

        The current step is redirected if the edit hid it, a debounced
        validation pass is scheduled and so is an autosave.
        """
        self.store.update(section, data)
        self.stepper.reconcile()
        if self.config.validation.validate_on_change:
            self.validator.trigger(self.store.snapshot(), section)
        self._schedule_autosave()

    def mark_step_valid(self, step_id: str, valid: bool) -> bool:
        """Record a step's validation outcome.

        Returns:
            Whether the step is completed afterwards.
        """
        return self.stepper.mark_complete(step_id, valid)

    def advance(self) -> NavigationResult:
        return self._navigate(self.stepper.advance, at_end_check=True)

    def retreat(self) -> NavigationResult:
        return self._navigate(self.stepper.retreat)

    def jump_to(self, step_id: str) -> NavigationResult:
        """Jump to ``step_id``.

        Raises:
            UnknownStepError: If ``step_id`` is not registered.
        """
        return self._navigate(lambda: self.stepper.jump_to(step_id))

    def reset(self) -> None:
        """Clear form data, errors and completed steps and start over.

        Pending validation and autosave are dropped. The saved draft is
        kept; call ``clear_draft()`` to remove it.
        """
        self.validator.cancel()
        self._autosaver.cancel()
        self.store.reset()
        self.stepper.reset()
        self._log.info("session_reset")

    async def submit_step(self, data: Mapping[str, Any] | None = None) -> SubmitResult:
        """Submit the current step.

        Merges ``data`` into the step's section, validates that section
        immediately, records the outcome and advances on success.
        """
        step_id = self.stepper.current
        section = self.registry.get(step_id).section
        if data is not None:
            self.store.update(section, data)
            self._schedule_autosave()
            if self.stepper.reconcile() is not None:
                denied = NavigationResult(
                    allowed=False,
                    step_id=self.stepper.current,
                    reason="not_visible",
                    message=f"Step '{step_id}' is no longer visible",
                )
                return SubmitResult(
                    step_id=step_id, valid=False, completed=False, navigation=denied
                )

        result = await self.validator.run_now(self.store.snapshot(), [section])
        errors = result.for_section(section)
        valid = not errors
        completed = self.stepper.mark_complete(step_id, valid)
        self._log.info(
            "step_submitted", step_id=step_id, valid=valid, errors=len(errors)
        )
        if not completed:
            return SubmitResult(
                step_id=step_id, valid=valid, completed=False, errors=errors
            )

        navigation = self.advance()
        return SubmitResult(
            step_id=step_id,
            valid=True,
            completed=True,
            errors=errors,
            navigation=navigation,
            finished=self.stepper.is_finished(),
        )

    async def validate_all(self) -> ValidationResult:
        """Validate the whole form now and replace the error map."""
        return await self.validator.run_now(self.store.snapshot())

    async def flush_validation(self) -> ValidationResult | None:
        """Run a pending debounced validation pass immediately."""
        return await self.validator.flush()

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    async def save_draft(self) -> DraftSaveResult:
        self._autosaver.cancel()
        return await self.store.save_draft()

    async def restore_draft(self) -> bool:
        """Replace form data with the saved draft and re-check the current step.

        Completed steps are not part of a draft, so they are kept as is.
        """
        self.validator.cancel()
        self._autosaver.cancel()
        restored = await self.store.load_draft()
        if restored:
            self.stepper.reconcile()
            self._log.info("draft_restored", current=self.stepper.current)
        return restored

    async def clear_draft(self) -> None:
        """Remove the saved draft.

        Raises:
            PersistenceError: If the draft store cannot remove it.
        """
        if self.store.persistence is not None:
            await self.store.persistence.clear()

    # ------------------------------------------------------------------
    # Observation and lifecycle
    # ------------------------------------------------------------------

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Receive every ``WizardEvent``; returns an unsubscribe callable."""
        return self.events.subscribe(listener)

    async def aclose(self) -> None:
        """Write a pending autosave and drop pending validation."""
        await self._autosaver.flush()
        self.validator.cancel()

    async def __aenter__(self) -> WizardSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _navigate(
        self, move: Callable[[], str], *, at_end_check: bool = False
    ) -> NavigationResult:
        before = self.stepper.current
        try:
            current = move()
        except NavigationDeniedError as e:
            self._log.info(
                "navigation_denied", step_id=e.step_id, reason=e.reason
            )
            return NavigationResult(
                allowed=False,
                step_id=self.stepper.current,
                reason=e.reason,
                message=e.message,
            )
        at_end = at_end_check and current == before and self.stepper.is_last_visible()
        return NavigationResult(allowed=True, step_id=current, at_end=at_end)

    def _schedule_autosave(self) -> None:
        if self.autosave_enabled:
            self._autosaver.trigger()

    async def _autosave(self, generation: int) -> None:
        if not self.store.is_dirty:
            return
        result = await self.store.save_draft()
        if not result.success:
            self._log.warning("autosave_failed", error=result.error)
