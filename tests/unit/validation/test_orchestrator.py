"""Tests for ValidationOrchestrator debouncing and error merging."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from offerwizard.store import FormDataStore
from offerwizard.validation import (
    ValidationContext,
    ValidationError,
    ValidationOrchestrator,
    ValidationRegistry,
    ValidationRunner,
)


@pytest.fixture
def seen() -> list[Any]:
    return []


@pytest.fixture
def registry(seen: list[Any]) -> ValidationRegistry:
    """Section "a" requires ``x``; section "b" requires ``y``."""
    registry = ValidationRegistry()

    def check_a(data: Any, context: ValidationContext) -> list[ValidationError]:
        seen.append(dict(data))
        if not data.get("x"):
            return [ValidationError.for_field("a", "x", "x is required")]
        return []

    def check_b(data: Any, context: ValidationContext) -> list[ValidationError]:
        if not data.get("y"):
            return [ValidationError.for_field("b", "y", "y is required")]
        return []

    registry.register_section_validator("a", check_a)
    registry.register_section_validator("b", check_b)
    return registry


def make(
    registry: ValidationRegistry, store: FormDataStore, **kwargs: Any
) -> ValidationOrchestrator:
    kwargs.setdefault("debounce_seconds", 0.02)
    return ValidationOrchestrator(ValidationRunner(registry), store, **kwargs)


class TestDebouncing:
    async def test_many_triggers_one_pass_with_latest_data(
        self, registry: ValidationRegistry, seen: list[Any]
    ) -> None:
        store = FormDataStore()
        orchestrator = make(registry, store)

        for value in range(10):
            store.update("a", {"x": value})
            orchestrator.trigger(store.snapshot(), "a")
        await orchestrator.wait()

        assert orchestrator.passes == 1
        assert seen == [{"x": 9}]
        assert store.validation_errors("a") == {}

    async def test_superseded_pass_never_writes(self, seen: list[Any]) -> None:
        release = asyncio.Event()
        registry = ValidationRegistry()

        async def slow(data: Any, context: ValidationContext) -> list[ValidationError]:
            seen.append(dict(data))
            if data.get("x") == "old":
                await release.wait()
            return [ValidationError.for_field("a", "x", f"saw {data['x']}")]

        registry.register_section_validator("a", slow)
        store = FormDataStore()
        orchestrator = make(registry, store, debounce_seconds=0)

        orchestrator.trigger({"a": {"x": "old"}}, "a")
        await asyncio.sleep(0.01)
        assert orchestrator.is_validating
        orchestrator.trigger({"a": {"x": "new"}}, "a")
        release.set()
        await orchestrator.wait()

        assert store.validation_errors("a") == {"x": "saw new"}
        assert orchestrator.passes == 1
        assert not orchestrator.is_validating

    async def test_flush_runs_pending_pass(self, registry: ValidationRegistry) -> None:
        store = FormDataStore()
        orchestrator = make(registry, store, debounce_seconds=60)
        orchestrator.trigger({"a": {}}, "a")
        assert orchestrator.pending

        result = await asyncio.wait_for(orchestrator.flush(), timeout=1)
        assert result is not None
        assert result is orchestrator.last_result
        assert store.validation_errors("a") == {"x": "x is required"}

    async def test_cancel(self, registry: ValidationRegistry) -> None:
        store = FormDataStore()
        orchestrator = make(registry, store)
        orchestrator.trigger({"a": {}}, "a")
        orchestrator.cancel()
        await asyncio.sleep(0.05)
        assert orchestrator.passes == 0
        assert store.validation_errors() == {}


class TestErrorMerging:
    async def test_section_mode_leaves_other_sections(
        self, registry: ValidationRegistry
    ) -> None:
        store = FormDataStore()
        store.set_validation_errors("b", {"y": "y is required"})
        orchestrator = make(registry, store)

        orchestrator.trigger({"a": {}, "b": {}}, "a")
        await orchestrator.wait()

        assert store.validation_errors() == {
            "a": {"x": "x is required"},
            "b": {"y": "y is required"},
        }

    async def test_sections_accumulate_across_a_burst(
        self, registry: ValidationRegistry
    ) -> None:
        store = FormDataStore()
        orchestrator = make(registry, store)
        orchestrator.trigger({"a": {}}, "a")
        orchestrator.trigger({"a": {}, "b": {}}, "b")
        await orchestrator.wait()

        assert set(store.validation_errors()) == {"a", "b"}
        assert orchestrator.passes == 1

    async def test_fixed_section_clears_its_errors(
        self, registry: ValidationRegistry
    ) -> None:
        store = FormDataStore()
        orchestrator = make(registry, store)
        await orchestrator.run_now({"a": {}}, ["a"])
        assert store.validation_errors("a") == {"x": "x is required"}

        await orchestrator.run_now({"a": {"x": 1}}, ["a"])
        assert store.validation_errors("a") == {}

    async def test_full_mode_replaces_map(self, registry: ValidationRegistry) -> None:
        store = FormDataStore()
        store.set_validation_errors("stale", {"f": "old"})
        orchestrator = make(registry, store, mode="full")

        orchestrator.trigger({"a": {"x": 1}, "b": {}}, "a")
        await orchestrator.wait()

        assert store.validation_errors() == {"b": {"y": "y is required"}}

    async def test_direct_validation_does_not_write(
        self, registry: ValidationRegistry
    ) -> None:
        store = FormDataStore()
        orchestrator = make(registry, store)
        result = await orchestrator.validate_all({"a": {}})
        assert not result.is_valid
        section = await orchestrator.validate_section("a", {}, {"a": {}})
        assert not section.is_valid
        assert store.validation_errors() == {}


class TestImmediatePasses:
    async def test_supersedes_pending_pass_for_same_section(
        self, registry: ValidationRegistry
    ) -> None:
        store = FormDataStore()
        orchestrator = make(registry, store)
        orchestrator.trigger({"a": {}}, "a")

        await orchestrator.run_now({"a": {"x": 1}}, ["a"])
        assert not orchestrator.pending
        await asyncio.sleep(0.05)

        assert orchestrator.passes == 0
        assert store.validation_errors("a") == {}

    async def test_other_sections_revalidated_on_newer_snapshot(
        self, registry: ValidationRegistry
    ) -> None:
        store = FormDataStore()
        orchestrator = make(registry, store)
        orchestrator.trigger({"a": {}, "b": {}}, "a")
        orchestrator.trigger({"a": {}, "b": {}}, "b")

        await orchestrator.run_now({"a": {"x": 1}, "b": {"y": 1}}, ["a"])
        assert orchestrator.pending
        await orchestrator.wait()

        assert orchestrator.passes == 1
        assert store.validation_errors() == {"a": {}, "b": {}}

    async def test_whole_form_pass_cancels_everything(
        self, registry: ValidationRegistry
    ) -> None:
        store = FormDataStore()
        orchestrator = make(registry, store)
        orchestrator.trigger({"a": {}}, "a")

        await orchestrator.run_now({"a": {"x": 1}})
        await asyncio.sleep(0.05)

        assert orchestrator.passes == 0
        assert store.validation_errors() == {}
