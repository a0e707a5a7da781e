"""Offer wizard exception hierarchy.

All exceptions can be imported from this package:
    from offerwizard.exceptions import UnknownStepError, NavigationDeniedError
"""

from __future__ import annotations

from offerwizard.exceptions.base import OfferWizardError
from offerwizard.exceptions.config import ConfigError
from offerwizard.exceptions.navigation import NavigationDeniedError
from offerwizard.exceptions.persistence import PersistenceError
from offerwizard.exceptions.registry import (
    DependencyCycleError,
    DuplicateStepError,
    StepRegistryError,
    UnknownStepError,
)

__all__ = [
    "OfferWizardError",
    "ConfigError",
    "StepRegistryError",
    "UnknownStepError",
    "DuplicateStepError",
    "DependencyCycleError",
    "NavigationDeniedError",
    "PersistenceError",
]
