"""Validation value objects.

``ValidationError`` here is a field-level finding, not an exception: it
is collected, grouped by section and displayed, and never raised.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from offerwizard.constants import (
    DEFAULT_VALIDATION_ACTION,
    GENERAL_SECTION,
    SECTION_ERROR_FIELD,
    ValidationAction,
)

__all__ = [
    "ValidationError",
    "ValidationResult",
    "ValidationContext",
    "ErrorMap",
    "group_errors_by_section",
    "to_error_map",
    "deduplicate_errors",
]

#: section -> field -> message
ErrorMap = dict[str, dict[str, str]]


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A single field-level validation finding.

    Attributes:
        path: Dot-qualified field path whose first segment is the owning
            section (e.g. ``identification.PIVA_UTENTE``).
        message: Human-readable message.
        section: Owning section. Derived from ``path`` when omitted.
    """

    path: str
    message: str
    section: str = ""

    def __post_init__(self) -> None:
        if not self.section:
            head = self.path.split(".", 1)[0]
            object.__setattr__(self, "section", head or GENERAL_SECTION)

    @property
    def field(self) -> str:
        """Field path relative to the section.

        Errors that point at the section itself use ``SECTION_ERROR_FIELD``.
        """
        if not self.path or self.path == self.section:
            return SECTION_ERROR_FIELD
        prefix = f"{self.section}."
        if self.path.startswith(prefix):
            return self.path[len(prefix) :]
        return self.path

    @classmethod
    def for_field(cls, section: str, field_path: str, message: str) -> ValidationError:
        return cls(path=f"{section}.{field_path}", message=message, section=section)

    @classmethod
    def for_section(cls, section: str, message: str) -> ValidationError:
        return cls(path=section, message=message, section=section)

    def to_dict(self) -> dict[str, str]:
        return {
            "section": self.section,
            "field": self.field,
            "path": self.path,
            "message": self.message,
        }


def group_errors_by_section(
    errors: Iterable[ValidationError],
) -> dict[str, list[ValidationError]]:
    """Group errors by owning section, preserving encounter order."""
    grouped: dict[str, list[ValidationError]] = {}
    for error in errors:
        grouped.setdefault(error.section, []).append(error)
    return grouped


def to_error_map(errors: Iterable[ValidationError]) -> ErrorMap:
    """Convert errors into the section -> field -> message map.

    When several errors hit the same field, the first message wins.
    """
    error_map: ErrorMap = {}
    for error in errors:
        error_map.setdefault(error.section, {}).setdefault(error.field, error.message)
    return error_map


def deduplicate_errors(errors: Iterable[ValidationError]) -> tuple[ValidationError, ...]:
    """Drop errors repeating an earlier (path, message) pair."""
    seen: set[tuple[str, str]] = set()
    unique: list[ValidationError] = []
    for error in errors:
        key = (error.path, error.message)
        if key not in seen:
            seen.add(key)
            unique.append(error)
    return tuple(unique)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of a validation pass.

    Attributes:
        errors: All findings of the pass, in the order they were produced.
    """

    errors: tuple[ValidationError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def by_section(self) -> dict[str, list[ValidationError]]:
        return group_errors_by_section(self.errors)

    def error_map(self) -> ErrorMap:
        return to_error_map(self.errors)

    def for_section(self, section: str) -> tuple[ValidationError, ...]:
        return tuple(e for e in self.errors if e.section == section)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [error.to_dict() for error in self.errors],
        }


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Read-only context handed to every validator.

    Attributes:
        form_data: Full form data snapshot.
        action: Record action being prepared (insert or update).
    """

    form_data: Mapping[str, Any] = field(default_factory=dict)
    action: ValidationAction = DEFAULT_VALIDATION_ACTION

    def section(self, name: str) -> Any:
        return self.form_data.get(name)

    @property
    def market_type(self) -> str | None:
        details = self.form_data.get("offerDetails")
        return details.get("TIPO_MERCATO") if isinstance(details, Mapping) else None

    @property
    def offer_type(self) -> str | None:
        details = self.form_data.get("offerDetails")
        return details.get("TIPO_OFFERTA") if isinstance(details, Mapping) else None
