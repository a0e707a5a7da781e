from __future__ import annotations

from collections.abc import Sequence

from offerwizard.exceptions.base import OfferWizardError


class StepRegistryError(OfferWizardError):
    """Base exception for step catalogue configuration errors.

    These are configuration-time failures: they abort initialization and
    are never turned into runtime state updates.
    """


class UnknownStepError(StepRegistryError):
    """Raised when a step id is not registered.

    Attributes:
        step_id: The id that failed to resolve.
        referenced_by: Step declaring the id as a dependency, when the
            failure happened while building the registry.
    """

    def __init__(self, step_id: str, referenced_by: str | None = None) -> None:
        self.step_id = step_id
        self.referenced_by = referenced_by
        if referenced_by is None:
            message = f"Unknown step '{step_id}'"
        else:
            message = (
                f"Step '{referenced_by}' depends on unknown step '{step_id}'"
            )
        super().__init__(message)


class DuplicateStepError(StepRegistryError):
    """Raised when two steps share the same id.

    Attributes:
        step_id: The duplicate step id.
    """

    def __init__(self, step_id: str) -> None:
        self.step_id = step_id
        super().__init__(
            f"Duplicate step id: '{step_id}'. Step ids must be unique."
        )


class DependencyCycleError(StepRegistryError):
    """Raised when the declared dependency graph contains a cycle.

    Attributes:
        cycle: Step ids along the cycle, with the first id repeated at the
            end (e.g. ``("a", "b", "a")``).
    """

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = tuple(cycle)
        super().__init__(
            f"Circular step dependency detected: {' -> '.join(self.cycle)}"
        )
