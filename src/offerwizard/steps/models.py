"""Step definitions for the wizard catalogue.

A ``Step`` is immutable configuration: it is declared once, handed to a
``StepRegistry`` and never changes afterwards.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from offerwizard.steps.visibility import VisibilityRule

__all__ = ["Step", "section_key_for"]

_SEPARATOR = re.compile(r"[-_\s]+")


def section_key_for(step_id: str) -> str:
    """Derive the form data section key for a step id.

    Dash-separated ids become camelCase keys (``offer-details`` ->
    ``offerDetails``); ids without separators are used unchanged.

    Example:
        >>> section_key_for("energy-price-references")
        'energyPriceReferences'
        >>> section_key_for("A")
        'A'
    """
    head, *rest = _SEPARATOR.split(step_id)
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


@dataclass(frozen=True, slots=True)
class Step:
    """A single wizard step.

    Attributes:
        id: Unique step identifier (e.g., "offer-details").
        title: Human-readable title.
        description: Short description shown under the title.
        optional: Whether the step may be left empty.
        depends_on: Ids of steps that must be completed before this one
            becomes accessible, in declaration order.
        visibility: Rule evaluated against the form data; ``None`` means
            the step is always visible.
        section: Form data section owned by the step. Defaults to the
            camelCase form of ``id``.
    """

    id: str
    title: str
    description: str = ""
    optional: bool = False
    depends_on: tuple[str, ...] = ()
    visibility: VisibilityRule | None = None
    section: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Step id must be a non-empty string")
        if not isinstance(self.depends_on, tuple):
            object.__setattr__(self, "depends_on", tuple(self.depends_on))
        if not self.section:
            object.__setattr__(self, "section", section_key_for(self.id))

    @property
    def is_conditional(self) -> bool:
        """True when the step carries a visibility rule."""
        return self.visibility is not None
