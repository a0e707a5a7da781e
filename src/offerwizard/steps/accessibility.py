"""Dependency resolution and accessibility calculation.

Accessibility is the conjunction of visibility (a function of form data)
and satisfied dependencies (a function of the completed step set). Both
inputs change independently, so every query recomputes from the
snapshots it is given. Nothing here is cached.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Any

from offerwizard.steps.registry import StepRegistry
from offerwizard.steps.visibility import VisibilityEvaluator

__all__ = ["AccessibilityCalculator", "AccessibilitySnapshot"]

FormData = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class AccessibilitySnapshot:
    """Visible and accessible step ids for one (form data, completed) pair.

    Attributes:
        visible: Visible step ids in wizard order.
        accessible: Accessible step ids in wizard order (a subset of
            ``visible``).
    """

    visible: tuple[str, ...]
    accessible: tuple[str, ...]


class AccessibilityCalculator:
    """Reachability predicates over the step registry.

    Example:
        ```python
        calc = AccessibilityCalculator(registry)
        calc.is_accessible("offer-basic", form_data, completed={"identification"})
        calc.accessible_steps(form_data, completed)
        ```
    """

    def __init__(
        self,
        registry: StepRegistry,
        evaluator: VisibilityEvaluator | None = None,
    ) -> None:
        self._registry = registry
        self._evaluator = evaluator or VisibilityEvaluator(registry)

    @property
    def registry(self) -> StepRegistry:
        return self._registry

    def is_visible(self, step_id: str, form_data: FormData) -> bool:
        return self._evaluator.is_visible(step_id, form_data)

    def missing_dependencies(
        self, step_id: str, completed: Collection[str]
    ) -> tuple[str, ...]:
        """Declared dependencies of ``step_id`` that are not completed."""
        return tuple(
            dep for dep in self._registry.dependencies(step_id) if dep not in completed
        )

    def dependencies_met(self, step_id: str, completed: Collection[str]) -> bool:
        """True iff every declared dependency is in ``completed``.

        Vacuously true for steps without dependencies.
        """
        return not self.missing_dependencies(step_id, completed)

    def is_accessible(
        self, step_id: str, form_data: FormData, completed: Collection[str]
    ) -> bool:
        return self.is_visible(step_id, form_data) and self.dependencies_met(
            step_id, completed
        )

    def visible_steps(self, form_data: FormData) -> tuple[str, ...]:
        """Registry order filtered by visibility."""
        return tuple(
            step.id for step in self._registry if self.is_visible(step.id, form_data)
        )

    def accessible_steps(
        self, form_data: FormData, completed: Collection[str]
    ) -> tuple[str, ...]:
        """Registry order filtered by accessibility."""
        return tuple(
            step.id
            for step in self._registry
            if self.is_accessible(step.id, form_data, completed)
        )

    def snapshot(
        self, form_data: FormData, completed: Collection[str]
    ) -> AccessibilitySnapshot:
        visible = self.visible_steps(form_data)
        accessible = tuple(
            step_id for step_id in visible if self.dependencies_met(step_id, completed)
        )
        return AccessibilitySnapshot(visible=visible, accessible=accessible)
