from __future__ import annotations


class OfferWizardError(Exception):
    """Base exception class for all offer wizard errors.

    Every custom exception in the package inherits from this class, so
    callers can catch wizard failures at their boundary while letting
    system exceptions propagate naturally.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            registry = StepRegistry(steps)
        except OfferWizardError as e:
            logger.error("wizard_init_failed", error=e.message)
            sys.exit(1)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the OfferWizardError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
