from __future__ import annotations

from offerwizard.exceptions.base import OfferWizardError


class NavigationDeniedError(OfferWizardError):
    """Raised when a stepper transition is not allowed.

    The transition does not happen and no state changes. The session
    turns this into a rejected ``NavigationResult`` rather than letting
    it unwind the caller.

    Attributes:
        step_id: Target step of the transition (or the current step when
            there is no target, e.g. retreating from the first step).
        reason: Short machine-readable reason code.
    """

    def __init__(self, step_id: str, reason: str, message: str | None = None) -> None:
        self.step_id = step_id
        self.reason = reason
        super().__init__(message or f"Navigation to '{step_id}' denied: {reason}")
