"""Validator registry and validator adapters.

Validators are external collaborators: the registry only catalogues
them. Three kinds exist:

- section validators, called with one section's data;
- cross-field validators, called with the whole form and returning at
  most one error;
- global validators, called with the whole form and returning any number
  of errors.

Any validator may be a plain function or a coroutine function.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

import pydantic

from offerwizard.logging import get_logger
from offerwizard.validation.models import ValidationContext, ValidationError

__all__ = [
    "SectionValidator",
    "CrossFieldValidator",
    "GlobalValidator",
    "RegisteredCrossFieldValidator",
    "SchemaValidator",
    "ValidationRegistry",
]

logger = get_logger(__name__)

ErrorsOrNone = Iterable[ValidationError] | None

SectionValidator = Callable[
    [Any, ValidationContext], ErrorsOrNone | Awaitable[ErrorsOrNone]
]
CrossFieldValidator = Callable[
    [ValidationContext], ValidationError | None | Awaitable[ValidationError | None]
]
GlobalValidator = Callable[[ValidationContext], ErrorsOrNone | Awaitable[ErrorsOrNone]]


@dataclass(frozen=True, slots=True)
class RegisteredCrossFieldValidator:
    """A cross-field validator with its name and optional owning section.

    ``section`` only decides where a crash of the validator is reported;
    the errors it returns carry their own sections.
    """

    name: str
    validator: CrossFieldValidator
    section: str | None = None


class SchemaValidator:
    """Adapts a pydantic model into a section validator.

    Each pydantic error becomes one ``ValidationError`` whose path is the
    section followed by the error location.

    Example:
        ```python
        class Identification(BaseModel):
            PIVA_UTENTE: str = Field(min_length=16, max_length=16)

        validator = SchemaValidator("identification", Identification)
        errors = validator({"PIVA_UTENTE": "123"}, context)
        # [ValidationError(path="identification.PIVA_UTENTE", ...)]
        ```
    """

    def __init__(self, section: str, model: type[pydantic.BaseModel]) -> None:
        self.section = section
        self.model = model

    def __repr__(self) -> str:
        return f"SchemaValidator({self.section!r}, {self.model.__name__})"

    def __call__(
        self, section_data: Any, context: ValidationContext
    ) -> list[ValidationError]:
        try:
            self.model.model_validate(section_data)
        except pydantic.ValidationError as e:
            return [self._convert(error) for error in e.errors()]
        return []

    def _convert(self, error: Any) -> ValidationError:
        location = ".".join(str(part) for part in error.get("loc", ()))
        path = f"{self.section}.{location}" if location else self.section
        return ValidationError(path=path, message=error["msg"], section=self.section)


class ValidationRegistry:
    """Catalogue of section, cross-field and global validators.

    Example:
        ```python
        registry = ValidationRegistry()

        @registry.section_validator("offerValidity")
        def check_dates(data, context):
            if data.get("DATA_FINE") and not data.get("DATA_INIZIO"):
                yield ValidationError.for_field(
                    "offerValidity", "DATA_INIZIO", "Start date is required"
                )
        ```
    """

    def __init__(self) -> None:
        self._section_validators: dict[str, list[SectionValidator]] = {}
        self._cross_field_validators: dict[str, RegisteredCrossFieldValidator] = {}
        self._global_validators: list[GlobalValidator] = []

    def register_section_validator(
        self, section: str, validator: SectionValidator
    ) -> None:
        self._section_validators.setdefault(section, []).append(validator)
        logger.debug("section_validator_registered", section=section)

    def register_schema(self, section: str, model: type[pydantic.BaseModel]) -> None:
        """Register a pydantic model as a validator for ``section``."""
        self.register_section_validator(section, SchemaValidator(section, model))

    def register_cross_field_validator(
        self,
        name: str,
        validator: CrossFieldValidator,
        *,
        section: str | None = None,
    ) -> None:
        """Register a named cross-field validator.

        Raises:
            ValueError: If a cross-field validator with this name exists.
        """
        if name in self._cross_field_validators:
            raise ValueError(f"Cross-field validator '{name}' is already registered")
        self._cross_field_validators[name] = RegisteredCrossFieldValidator(
            name=name, validator=validator, section=section
        )
        logger.debug("cross_field_validator_registered", name=name)

    def register_global_validator(self, validator: GlobalValidator) -> None:
        self._global_validators.append(validator)

    def section_validator(
        self, section: str
    ) -> Callable[[SectionValidator], SectionValidator]:
        """Decorator form of ``register_section_validator``."""

        def decorator(fn: SectionValidator) -> SectionValidator:
            self.register_section_validator(section, fn)
            return fn

        return decorator

    def cross_field_validator(
        self, name: str, *, section: str | None = None
    ) -> Callable[[CrossFieldValidator], CrossFieldValidator]:
        """Decorator form of ``register_cross_field_validator``."""

        def decorator(fn: CrossFieldValidator) -> CrossFieldValidator:
            self.register_cross_field_validator(name, fn, section=section)
            return fn

        return decorator

    def section_validators(self, section: str) -> tuple[SectionValidator, ...]:
        return tuple(self._section_validators.get(section, ()))

    def sections(self) -> tuple[str, ...]:
        """Sections with at least one validator, in registration order."""
        return tuple(self._section_validators)

    def cross_field_validators(self) -> tuple[RegisteredCrossFieldValidator, ...]:
        return tuple(self._cross_field_validators.values())

    def global_validators(self) -> tuple[GlobalValidator, ...]:
        return tuple(self._global_validators)

    def clear(self) -> None:
        """Remove every registered validator."""
        self._section_validators.clear()
        self._cross_field_validators.clear()
        self._global_validators.clear()
