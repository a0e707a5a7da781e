"""Offer wizard: step navigation, validation and drafts for energy offers."""

from __future__ import annotations

__version__ = "0.1.0"

from offerwizard.session import NavigationResult, SubmitResult, WizardSession  # noqa: E402

__all__ = [
    "__version__",
    "WizardSession",
    "NavigationResult",
    "SubmitResult",
]
