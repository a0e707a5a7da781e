"""Wizard steps: catalogue, visibility, dependencies and accessibility."""

from __future__ import annotations

from offerwizard.steps.accessibility import (
    AccessibilityCalculator,
    AccessibilitySnapshot,
)
from offerwizard.steps.catalog import OFFER_STEPS, build_offer_registry
from offerwizard.steps.models import Step, section_key_for
from offerwizard.steps.registry import StepRegistry
from offerwizard.steps.visibility import (
    AllOf,
    AnyOf,
    FieldEquals,
    FieldIn,
    NoItemMatches,
    Not,
    Predicate,
    VisibilityEvaluator,
    VisibilityRule,
    all_of,
    any_of,
    get_in,
)

__all__ = [
    "Step",
    "section_key_for",
    "StepRegistry",
    "VisibilityRule",
    "VisibilityEvaluator",
    "FieldEquals",
    "FieldIn",
    "NoItemMatches",
    "Not",
    "AllOf",
    "AnyOf",
    "Predicate",
    "all_of",
    "any_of",
    "get_in",
    "AccessibilityCalculator",
    "AccessibilitySnapshot",
    "OFFER_STEPS",
    "build_offer_registry",
]
