from __future__ import annotations

from pathlib import Path

from offerwizard.exceptions.base import OfferWizardError


class PersistenceError(OfferWizardError):
    """Raised by draft stores when a draft cannot be written or read.

    Never fatal: the form data store logs it, keeps the dirty flag set
    and reports the failure through its result value.

    Attributes:
        message: Human-readable error message.
        path: Location of the draft, when the store is file based.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)
