"""Tests for StepRegistry construction and lookups."""

from __future__ import annotations

import pytest

from offerwizard.exceptions import (
    DependencyCycleError,
    DuplicateStepError,
    StepRegistryError,
    UnknownStepError,
)
from offerwizard.steps import Step, StepRegistry


class TestStepRegistryConstruction:
    """Tests for the checks made when a registry is built."""

    def test_preserves_declaration_order(self) -> None:
        """Steps should be listed in the order they were declared."""
        registry = StepRegistry(
            [Step(id="z", title="Z"), Step(id="a", title="A"), Step(id="m", title="M")]
        )
        assert registry.ids() == ("z", "a", "m")
        assert [s.id for s in registry] == ["z", "a", "m"]
        # Restartable
        assert [s.id for s in registry] == ["z", "a", "m"]

    def test_duplicate_id_raises(self) -> None:
        with pytest.raises(DuplicateStepError) as exc_info:
            StepRegistry([Step(id="a", title="A"), Step(id="a", title="Again")])
        assert exc_info.value.step_id == "a"

    def test_unknown_dependency_raises(self) -> None:
        """A dependency on an unregistered step is a configuration error."""
        with pytest.raises(UnknownStepError) as exc_info:
            StepRegistry([Step(id="a", title="A", depends_on=("ghost",))])
        assert exc_info.value.step_id == "ghost"
        assert exc_info.value.referenced_by == "a"
        assert "ghost" in exc_info.value.message

    def test_cycle_raises_with_cycle_path(self) -> None:
        """The error should carry the offending cycle."""
        with pytest.raises(DependencyCycleError) as exc_info:
            StepRegistry(
                [
                    Step(id="a", title="A", depends_on=("c",)),
                    Step(id="b", title="B", depends_on=("a",)),
                    Step(id="c", title="C", depends_on=("b",)),
                ]
            )
        cycle = exc_info.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"a", "b", "c"}
        assert " -> " in exc_info.value.message

    def test_self_dependency_is_a_cycle(self) -> None:
        with pytest.raises(DependencyCycleError) as exc_info:
            StepRegistry([Step(id="a", title="A", depends_on=("a",))])
        assert exc_info.value.cycle == ("a", "a")

    def test_registry_errors_share_base_class(self) -> None:
        with pytest.raises(StepRegistryError):
            StepRegistry([Step(id="a", title="A", depends_on=("a",))])


class TestStepRegistryLookups:
    """Tests for lookups on a built registry."""

    def test_get_unknown_step_raises(self, abc_registry: StepRegistry) -> None:
        with pytest.raises(UnknownStepError) as exc_info:
            abc_registry.get("nope")
        assert exc_info.value.referenced_by is None

    def test_get_returns_step(self, abc_registry: StepRegistry) -> None:
        step = abc_registry.get("b")
        assert step.title == "B"
        assert step.depends_on == ("a",)

    def test_dependencies_and_dependents(self, abc_registry: StepRegistry) -> None:
        assert abc_registry.dependencies("c") == ("b",)
        assert abc_registry.dependents("a") == ("b",)
        assert abc_registry.dependents("c") == ()

    def test_topological_order_puts_dependencies_first(self) -> None:
        registry = StepRegistry(
            [
                Step(id="late", title="Late", depends_on=("early",)),
                Step(id="early", title="Early"),
            ]
        )
        assert registry.topological_order() == ("early", "late")

    def test_index_of_and_contains(self, abc_registry: StepRegistry) -> None:
        assert abc_registry.index_of("c") == 2
        assert "a" in abc_registry
        assert "x" not in abc_registry
        assert len(abc_registry) == 3

    def test_step_for_section(self) -> None:
        registry = StepRegistry([Step(id="offer-details", title="Details")])
        step = registry.step_for_section("offerDetails")
        assert step is not None
        assert step.id == "offer-details"
        assert registry.step_for_section("missing") is None


class TestStep:
    """Tests for the Step value object."""

    def test_section_derived_from_id(self) -> None:
        assert Step(id="energy-price-references", title="x").section == (
            "energyPriceReferences"
        )

    def test_explicit_section_kept(self) -> None:
        assert Step(id="a", title="A", section="custom").section == "custom"

    def test_depends_on_coerced_to_tuple(self) -> None:
        step = Step(id="b", title="B", depends_on=["a"])  # type: ignore[arg-type]
        assert step.depends_on == ("a",)

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValueError):
            Step(id="", title="Nothing")
