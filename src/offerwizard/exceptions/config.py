from __future__ import annotations

from typing import Any

from offerwizard.exceptions.base import OfferWizardError


class ConfigError(OfferWizardError):
    """Exception for configuration loading, parsing, and validation errors.

    Raised when ``offerwizard.yaml`` cannot be parsed or a value fails
    pydantic validation.

    Attributes:
        message: Human-readable error message describing the configuration issue.
        field: Optional dotted field name that caused the error
            (e.g., "validation.debounce_ms").
        value: Optional value that failed validation (for debugging).
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message)
