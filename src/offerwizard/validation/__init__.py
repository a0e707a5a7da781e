"""Form validation: registry, runner, orchestration and default rules."""

from __future__ import annotations

from offerwizard.validation.models import (
    ErrorMap,
    ValidationContext,
    ValidationError,
    ValidationResult,
    deduplicate_errors,
    group_errors_by_section,
    to_error_map,
)
from offerwizard.validation.orchestrator import (
    ValidationErrorSink,
    ValidationMode,
    ValidationOrchestrator,
)
from offerwizard.validation.registry import (
    CrossFieldValidator,
    GlobalValidator,
    SchemaValidator,
    SectionValidator,
    ValidationRegistry,
)
from offerwizard.validation.runner import ValidationRunner
from offerwizard.validation.schemas import default_validation_registry

__all__ = [
    "ErrorMap",
    "ValidationContext",
    "ValidationError",
    "ValidationResult",
    "deduplicate_errors",
    "group_errors_by_section",
    "to_error_map",
    "ValidationErrorSink",
    "ValidationMode",
    "ValidationOrchestrator",
    "CrossFieldValidator",
    "GlobalValidator",
    "SchemaValidator",
    "SectionValidator",
    "ValidationRegistry",
    "ValidationRunner",
    "default_validation_registry",
]
