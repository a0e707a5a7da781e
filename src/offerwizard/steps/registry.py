"""Step registry: the read-only catalogue of wizard steps.

The registry validates the catalogue once, at construction: ids must be
unique, every dependency must name a registered step and the dependency
graph must be acyclic. After that it never changes.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from offerwizard.exceptions import (
    DependencyCycleError,
    DuplicateStepError,
    UnknownStepError,
)
from offerwizard.logging import get_logger
from offerwizard.steps.models import Step

__all__ = ["StepRegistry"]

logger = get_logger(__name__)

_UNVISITED, _IN_PROGRESS, _DONE = 0, 1, 2


class StepRegistry:
    """Ordered, immutable catalogue of wizard steps.

    Declaration order is the wizard order. Iterating the registry, or
    calling ``list_steps()``, always yields steps in that order and can be
    restarted any number of times.

    Example:
        ```python
        registry = StepRegistry([
            Step(id="A", title="Market"),
            Step(id="B", title="Details", depends_on=("A",)),
        ])
        registry.get("B").depends_on  # ("A",)
        registry.topological_order()  # ("A", "B")
        ```

    Raises:
        DuplicateStepError: If two steps share an id.
        UnknownStepError: If a step depends on an unregistered id.
        DependencyCycleError: If the dependency graph has a cycle.
    """

    def __init__(self, steps: Iterable[Step]) -> None:
        ordered: list[Step] = []
        by_id: dict[str, Step] = {}
        for step in steps:
            if step.id in by_id:
                raise DuplicateStepError(step.id)
            by_id[step.id] = step
            ordered.append(step)

        for step in ordered:
            for dep in step.depends_on:
                if dep not in by_id:
                    raise UnknownStepError(dep, referenced_by=step.id)

        self._steps: tuple[Step, ...] = tuple(ordered)
        self._by_id = by_id
        self._index = {step.id: i for i, step in enumerate(ordered)}
        self._by_section = {step.section: step for step in reversed(ordered)}
        self._topological = self._sort_topologically()
        logger.debug("step_registry_built", steps=len(self._steps))

    def _sort_topologically(self) -> tuple[str, ...]:
        """Depth-first topological sort with cycle reporting.

        Returns:
            Step ids with every dependency before its dependents; ties keep
            declaration order.

        Raises:
            DependencyCycleError: Carrying the first cycle found.
        """
        state = dict.fromkeys(self._by_id, _UNVISITED)
        order: list[str] = []
        stack: list[str] = []

        def visit(step_id: str) -> None:
            state[step_id] = _IN_PROGRESS
            stack.append(step_id)
            for dep in self._by_id[step_id].depends_on:
                if state[dep] == _IN_PROGRESS:
                    cycle_start = stack.index(dep)
                    raise DependencyCycleError([*stack[cycle_start:], dep])
                if state[dep] == _UNVISITED:
                    visit(dep)
            stack.pop()
            state[step_id] = _DONE
            order.append(step_id)

        for step in self._steps:
            if state[step.id] == _UNVISITED:
                visit(step.id)
        return tuple(order)

    def list_steps(self) -> tuple[Step, ...]:
        """Return all steps in declaration order."""
        return self._steps

    def ids(self) -> tuple[str, ...]:
        """Return all step ids in declaration order."""
        return tuple(step.id for step in self._steps)

    def get(self, step_id: str) -> Step:
        """Look up a step by id.

        Raises:
            UnknownStepError: If no step with this id is registered.
        """
        try:
            return self._by_id[step_id]
        except KeyError:
            raise UnknownStepError(step_id) from None

    def has(self, step_id: str) -> bool:
        return step_id in self._by_id

    def index_of(self, step_id: str) -> int:
        """Position of a step in declaration order.

        Raises:
            UnknownStepError: If no step with this id is registered.
        """
        self.get(step_id)
        return self._index[step_id]

    def dependencies(self, step_id: str) -> tuple[str, ...]:
        """Direct dependencies of a step."""
        return self.get(step_id).depends_on

    def dependents(self, step_id: str) -> tuple[str, ...]:
        """Steps that declare ``step_id`` as a direct dependency."""
        self.get(step_id)
        return tuple(s.id for s in self._steps if step_id in s.depends_on)

    def step_for_section(self, section: str) -> Step | None:
        """Return the first step owning ``section``, if any."""
        return self._by_section.get(section)

    def topological_order(self) -> tuple[str, ...]:
        """Step ids ordered so that dependencies precede dependents."""
        return self._topological

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._by_id

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)
