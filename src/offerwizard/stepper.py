"""Stepper state machine: current step, completed steps and transitions.

The machine owns two pieces of state, the current step id and the set of
completed step ids. Form data is never stored here; it is pulled from a
provider (normally the form data store) each time a decision is made, so
visibility and accessibility are always computed from the latest
snapshot.

Invariant: ``current`` is always a visible step. Transitions that would
break it are refused, and ``reconcile()`` repairs it after a form data
change hides the current step.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from offerwizard.events import EventBus, StepChanged, StepCompletionChanged
from offerwizard.exceptions import NavigationDeniedError
from offerwizard.logging import get_logger
from offerwizard.steps.accessibility import AccessibilityCalculator

__all__ = ["StepperStateMachine", "FormDataProvider"]

logger = get_logger(__name__)

FormDataProvider = Callable[[], Mapping[str, Any]]


class StepperStateMachine:
    """Navigation state for one wizard session.

    Args:
        calculator: Accessibility calculator over the step registry.
        form_data: Zero-argument callable returning the current form data
            snapshot.
        events: Optional bus receiving ``StepChanged`` and
            ``StepCompletionChanged`` events.

    Example:
        ```python
        stepper = StepperStateMachine(calculator, store.snapshot)
        stepper.mark_complete("identification", valid=True)
        stepper.advance()          # -> "offer-basic"
        stepper.jump_to("dual-offers")  # NavigationDeniedError unless visible
        ```
    """

    def __init__(
        self,
        calculator: AccessibilityCalculator,
        form_data: FormDataProvider,
        events: EventBus | None = None,
    ) -> None:
        if not len(calculator.registry):
            raise ValueError("Cannot build a stepper over an empty step registry")
        self._calc = calculator
        self._form_data = form_data
        self._events = events
        self._completed: set[str] = set()
        self._current = self._initial_step()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current(self) -> str:
        return self._current

    @property
    def completed(self) -> frozenset[str]:
        return frozenset(self._completed)

    def visible_steps(self) -> tuple[str, ...]:
        return self._calc.visible_steps(self._form_data())

    def accessible_steps(self) -> tuple[str, ...]:
        return self._calc.accessible_steps(self._form_data(), self._completed)

    def is_visible(self, step_id: str) -> bool:
        return self._calc.is_visible(step_id, self._form_data())

    def is_accessible(self, step_id: str) -> bool:
        return self._calc.is_accessible(step_id, self._form_data(), self._completed)

    def is_last_visible(self) -> bool:
        visible = self.visible_steps()
        return bool(visible) and visible[-1] == self._current

    def is_finished(self) -> bool:
        """True when the current step is the last visible one and completed."""
        return self.is_last_visible() and self._current in self._completed

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def advance(self) -> str:
        """Move to the next visible step.

        Allowed when the current step is completed. On the last visible
        step the call succeeds without moving.

        Returns:
            The current step id after the call.

        Raises:
            NavigationDeniedError: If the current step is not completed,
                or the next visible step has unmet dependencies.
        """
        self.reconcile()
        visible = self.visible_steps()
        position = self._position_in(visible)
        if position == len(visible) - 1:
            return self._current

        if self._current not in self._completed:
            raise NavigationDeniedError(
                self._current,
                "current_step_incomplete",
                f"Step '{self._current}' must be completed before advancing",
            )

        target = visible[position + 1]
        missing = self._calc.missing_dependencies(target, self._completed)
        if missing:
            raise NavigationDeniedError(
                target,
                "dependencies_not_met",
                f"Step '{target}' requires: {', '.join(missing)}",
            )
        self._move_to(target, "advance")
        return self._current

    def retreat(self) -> str:
        """Move to the previous visible step.

        Raises:
            NavigationDeniedError: If the current step is the first visible one.
        """
        self.reconcile()
        visible = self.visible_steps()
        position = self._position_in(visible)
        if position == 0:
            raise NavigationDeniedError(
                self._current,
                "at_first_step",
                f"Step '{self._current}' is the first step",
            )
        self._move_to(visible[position - 1], "retreat")
        return self._current

    def jump_to(self, step_id: str) -> str:
        """Move directly to an accessible step.

        Raises:
            UnknownStepError: If ``step_id`` is not registered.
            NavigationDeniedError: If the step is hidden or has unmet
                dependencies.
        """
        form_data = self._form_data()
        if not self._calc.is_visible(step_id, form_data):
            raise NavigationDeniedError(
                step_id, "not_visible", f"Step '{step_id}' is not visible"
            )
        missing = self._calc.missing_dependencies(step_id, self._completed)
        if missing:
            raise NavigationDeniedError(
                step_id,
                "dependencies_not_met",
                f"Step '{step_id}' requires: {', '.join(missing)}",
            )
        if step_id != self._current:
            self._move_to(step_id, "jump")
        return self._current

    def mark_complete(self, step_id: str, valid: bool) -> bool:
        """Record the validation outcome of a step.

        A passing step is added to the completed set only if it is
        accessible right now. A failing step is removed from it. Steps
        depending on a removed step are not pruned; they simply stop being
        accessible.

        Returns:
            Whether ``step_id`` is completed after the call.

        Raises:
            UnknownStepError: If ``step_id`` is not registered.
        """
        self._calc.registry.get(step_id)
        if not valid:
            if step_id in self._completed:
                self._completed.discard(step_id)
                logger.info("step_completion_revoked", step_id=step_id)
                self._publish(StepCompletionChanged(step_id, completed=False))
            return False

        if not self.is_accessible(step_id):
            logger.info("step_completion_refused", step_id=step_id)
            return False
        if step_id not in self._completed:
            self._completed.add(step_id)
            logger.info("step_completed", step_id=step_id)
            self._publish(StepCompletionChanged(step_id, completed=True))
        return True

    def reconcile(self) -> str | None:
        """Redirect away from the current step if it is no longer visible.

        The replacement is the nearest step at or before the former
        position (in registry order) that is visible and accessible; failing
        that the first accessible step, then the first visible step.

        Returns:
            The new current step id, or None when no redirect was needed.
        """
        form_data = self._form_data()
        if self._calc.is_visible(self._current, form_data):
            return None

        registry = self._calc.registry
        ids = registry.ids()
        former = registry.index_of(self._current)
        target = next(
            (
                step_id
                for step_id in reversed(ids[: former + 1])
                if self._calc.is_accessible(step_id, form_data, self._completed)
            ),
            None,
        )
        if target is None:
            accessible = self._calc.accessible_steps(form_data, self._completed)
            visible = self._calc.visible_steps(form_data)
            target = (accessible or visible or (None,))[0]
        if target is None:
            logger.warning("no_visible_steps", current=self._current)
            return None

        self._move_to(target, "redirect")
        return target

    def reset(self) -> None:
        """Clear completed steps and return to the initial step."""
        self._completed.clear()
        previous = self._current
        self._current = self._initial_step()
        if previous != self._current:
            self._publish(StepChanged(previous, self._current, "reset"))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _initial_step(self) -> str:
        visible = self._calc.visible_steps(self._form_data())
        if visible:
            return visible[0]
        first = self._calc.registry.ids()[0]
        logger.warning("no_visible_steps", fallback=first)
        return first

    def _position_in(self, visible: tuple[str, ...]) -> int:
        # Only reachable when no step at all is visible
        if self._current not in visible:
            raise NavigationDeniedError(
                self._current, "not_visible", "No visible step to navigate from"
            )
        return visible.index(self._current)

    def _move_to(self, step_id: str, reason: str) -> None:
        previous = self._current
        self._current = step_id
        logger.info("step_changed", previous=previous, current=step_id, reason=reason)
        self._publish(StepChanged(previous, step_id, reason))

    def _publish(self, event: StepChanged | StepCompletionChanged) -> None:
        if self._events is not None:
            self._events.publish(event)
