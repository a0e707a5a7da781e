"""Visibility rules and the visibility evaluator.

Rules are small frozen records that are callable with a form data
snapshot and return a boolean. They are attached to steps when the
catalogue is declared, so a step either carries its rule or is
unconditionally visible; there is no string-keyed lookup at runtime.

Every rule is pure: the same snapshot always yields the same answer,
which lets callers re-evaluate visibility on every change without
caching.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from offerwizard.steps.registry import StepRegistry

__all__ = [
    "VisibilityRule",
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
    "VisibilityEvaluator",
]

FormData = Mapping[str, Any]


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


MISSING: Any = _Missing()


def get_in(form_data: FormData, path: str, default: Any = MISSING) -> Any:
    """Read a dot-qualified path from a form data snapshot.

    Args:
        form_data: Section-keyed form data.
        path: Dot-qualified path such as ``offerDetails.TIPO_MERCATO``.
        default: Returned when any segment is absent.

    Returns:
        The value at ``path`` or ``default``.
    """
    current: Any = form_data
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return default
        current = current[segment]
    return current


@runtime_checkable
class VisibilityRule(Protocol):
    """Protocol for step visibility rules."""

    def __call__(self, form_data: FormData) -> bool: ...

    def describe(self) -> str: ...


@dataclass(frozen=True, slots=True)
class FieldEquals:
    """Visible when the value at ``path`` equals ``value``."""

    path: str
    value: Any

    def __call__(self, form_data: FormData) -> bool:
        return get_in(form_data, self.path) == self.value

    def describe(self) -> str:
        return f"{self.path} == {self.value!r}"


@dataclass(frozen=True, slots=True)
class FieldIn:
    """Visible when the value at ``path`` is one of ``values``."""

    path: str
    values: tuple[Any, ...]

    def __call__(self, form_data: FormData) -> bool:
        value = get_in(form_data, self.path)
        return value is not MISSING and value in self.values

    def describe(self) -> str:
        options = ", ".join(repr(v) for v in self.values)
        return f"{self.path} in ({options})"


@dataclass(frozen=True, slots=True)
class NoItemMatches:
    """Visible unless a list section holds an item with ``field == value``.

    A missing section, or a section that is not a list, has no items and
    therefore never matches.
    """

    path: str
    field: str
    value: Any

    def __call__(self, form_data: FormData) -> bool:
        items = get_in(form_data, self.path, None)
        if not isinstance(items, Sequence) or isinstance(items, (str, bytes)):
            return True
        return not any(
            isinstance(item, Mapping) and item.get(self.field) == self.value
            for item in items
        )

    def describe(self) -> str:
        return f"no {self.path}[*].{self.field} == {self.value!r}"


@dataclass(frozen=True, slots=True)
class Not:
    """Negates another rule."""

    rule: VisibilityRule

    def __call__(self, form_data: FormData) -> bool:
        return not self.rule(form_data)

    def describe(self) -> str:
        return f"not ({self.rule.describe()})"


@dataclass(frozen=True, slots=True)
class AllOf:
    """Visible when every nested rule holds (vacuously true when empty)."""

    rules: tuple[VisibilityRule, ...]

    def __call__(self, form_data: FormData) -> bool:
        return all(rule(form_data) for rule in self.rules)

    def describe(self) -> str:
        return " and ".join(f"({rule.describe()})" for rule in self.rules)


@dataclass(frozen=True, slots=True)
class AnyOf:
    """Visible when at least one nested rule holds."""

    rules: tuple[VisibilityRule, ...]

    def __call__(self, form_data: FormData) -> bool:
        return any(rule(form_data) for rule in self.rules)

    def describe(self) -> str:
        return " or ".join(f"({rule.describe()})" for rule in self.rules)


@dataclass(frozen=True, slots=True)
class Predicate:
    """Wraps a plain function so it can be used as a rule.

    The function must be pure; ``name`` is only used for descriptions.
    """

    name: str
    fn: Callable[[FormData], bool]

    def __call__(self, form_data: FormData) -> bool:
        return bool(self.fn(form_data))

    def describe(self) -> str:
        return self.name


def all_of(*rules: VisibilityRule) -> AllOf:
    return AllOf(rules)


def any_of(*rules: VisibilityRule) -> AnyOf:
    return AnyOf(rules)


class VisibilityEvaluator:
    """Evaluates step visibility against form data snapshots.

    Example:
        ```python
        evaluator = VisibilityEvaluator(registry)
        evaluator.is_visible("dual-offers", {"offerDetails": {"TIPO_MERCATO": "03"}})
        # True
        ```
    """

    def __init__(self, registry: StepRegistry) -> None:
        self._registry = registry

    def is_visible(self, step_id: str, form_data: FormData) -> bool:
        """Return whether a step is visible for the given form data.

        Raises:
            UnknownStepError: If ``step_id`` is not registered.
        """
        rule = self._registry.get(step_id).visibility
        if rule is None:
            return True
        return bool(rule(form_data))
