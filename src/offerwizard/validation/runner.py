"""Validation runner: executes registered validators against form data.

The runner never lets a validator failure escape. An exception raised by
a validator is logged and replaced by a single synthetic error on the
validator's section, so one misbehaving validator cannot block the
others.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from offerwizard.constants import (
    DEFAULT_VALIDATION_ACTION,
    GENERAL_SECTION,
    ValidationAction,
)
from offerwizard.logging import get_logger
from offerwizard.validation.models import (
    ValidationContext,
    ValidationError,
    ValidationResult,
    deduplicate_errors,
)
from offerwizard.validation.registry import (
    RegisteredCrossFieldValidator,
    ValidationRegistry,
)

__all__ = ["ValidationRunner", "validator_failure_message"]

logger = get_logger(__name__)

FormData = Mapping[str, Any]


def _validator_name(validator: Callable[..., Any]) -> str:
    return getattr(validator, "__name__", None) or type(validator).__name__


def validator_failure_message(name: str, exc: BaseException) -> str:
    return f"Validator '{name}' failed: {exc}"


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _as_errors(value: Any) -> list[ValidationError]:
    if value is None:
        return []
    if isinstance(value, ValidationError):
        return [value]
    return list(value)


class ValidationRunner:
    """Runs section-scoped or whole-form validation passes.

    Args:
        registry: Validators to run.
        deduplicate: Drop repeated (path, message) pairs from whole-form
            results.
        action: Record action put into every ``ValidationContext``.

    Example:
        ```python
        runner = ValidationRunner(default_validation_registry())
        result = await runner.validate_all(form_data)
        result.error_map()  # {"identification": {"PIVA_UTENTE": "..."}}
        ```
    """

    def __init__(
        self,
        registry: ValidationRegistry,
        *,
        deduplicate: bool = True,
        action: ValidationAction = DEFAULT_VALIDATION_ACTION,
    ) -> None:
        self.registry = registry
        self.deduplicate = deduplicate
        self.action = action

    def _context(self, form_data: FormData) -> ValidationContext:
        return ValidationContext(form_data=form_data, action=self.action)

    async def _guarded(
        self,
        section: str,
        validator: Callable[..., Any],
        *args: Any,
    ) -> list[ValidationError]:
        name = _validator_name(validator)
        try:
            return _as_errors(await _resolve(validator(*args)))
        except Exception as exc:
            logger.exception("validator_failed", section=section, validator=name)
            return [
                ValidationError.for_section(
                    section, validator_failure_message(name, exc)
                )
            ]

    async def _run_section_validators(
        self, section: str, section_data: Any, context: ValidationContext
    ) -> list[ValidationError]:
        errors: list[ValidationError] = []
        for validator in self.registry.section_validators(section):
            errors.extend(await self._guarded(section, validator, section_data, context))
        return errors

    async def _run_cross_field(
        self, entry: RegisteredCrossFieldValidator, context: ValidationContext
    ) -> list[ValidationError]:
        return await self._guarded(
            entry.section or GENERAL_SECTION, entry.validator, context
        )

    async def _run_cross_field_validators(
        self, context: ValidationContext
    ) -> list[ValidationError]:
        errors: list[ValidationError] = []
        for entry in self.registry.cross_field_validators():
            errors.extend(await self._run_cross_field(entry, context))
        return errors

    async def _run_global_validators(
        self, context: ValidationContext
    ) -> list[ValidationError]:
        errors: list[ValidationError] = []
        for validator in self.registry.global_validators():
            errors.extend(await self._guarded(GENERAL_SECTION, validator, context))
        return errors

    async def validate_section(
        self,
        section: str,
        section_data: Any,
        form_data: FormData,
    ) -> ValidationResult:
        """Validate one section.

        Runs the section's validators (skipped when ``section_data`` is
        None) and keeps only the cross-field errors belonging to
        ``section``.
        """
        context = self._context(form_data)
        errors: list[ValidationError] = []
        if section_data is not None:
            errors.extend(
                await self._run_section_validators(section, section_data, context)
            )
        cross_field = await self._run_cross_field_validators(context)
        errors.extend(e for e in cross_field if e.section == section)
        logger.debug("section_validated", section=section, errors=len(errors))
        return ValidationResult(errors=tuple(errors))

    async def validate_sections(
        self, sections: Iterable[str], form_data: FormData
    ) -> ValidationResult:
        """Validate several sections against the same snapshot."""
        results = await asyncio.gather(
            *(
                self.validate_section(section, form_data.get(section), form_data)
                for section in sections
            )
        )
        errors = [error for result in results for error in result.errors]
        return ValidationResult(errors=deduplicate_errors(errors))

    async def validate_all(self, form_data: FormData) -> ValidationResult:
        """Validate the whole form.

        Section validators run for every section present in ``form_data``;
        cross-field and global validators always run.
        """
        context = self._context(form_data)
        present = [s for s in self.registry.sections() if form_data.get(s) is not None]
        section_results = await asyncio.gather(
            *(
                self._run_section_validators(section, form_data[section], context)
                for section in present
            )
        )
        errors = [error for result in section_results for error in result]
        errors.extend(await self._run_cross_field_validators(context))
        errors.extend(await self._run_global_validators(context))
        if self.deduplicate:
            unique = deduplicate_errors(errors)
        else:
            unique = tuple(errors)
        logger.debug(
            "form_validated", sections=len(present), errors=len(unique)
        )
        return ValidationResult(errors=unique)
