"""Tests for ValidationRunner."""

from __future__ import annotations

from typing import Any

from offerwizard.validation import (
    ValidationContext,
    ValidationError,
    ValidationRegistry,
    ValidationRunner,
)


def required(section: str, field: str):
    def validator(data: Any, context: ValidationContext) -> list[ValidationError]:
        if not data.get(field):
            return [ValidationError.for_field(section, field, f"{field} is required")]
        return []

    return validator


class TestValidateSection:
    async def test_runs_only_the_section(self) -> None:
        registry = ValidationRegistry()
        registry.register_section_validator("a", required("a", "x"))
        registry.register_section_validator("b", required("b", "y"))
        runner = ValidationRunner(registry)

        result = await runner.validate_section("a", {}, {"a": {}, "b": {}})
        assert [e.path for e in result.errors] == ["a.x"]

    async def test_includes_cross_field_errors_of_the_section(self) -> None:
        registry = ValidationRegistry()
        registry.register_cross_field_validator(
            "a_rule", lambda context: ValidationError.for_field("a", "z", "cross")
        )
        registry.register_cross_field_validator(
            "b_rule", lambda context: ValidationError.for_field("b", "z", "cross")
        )
        runner = ValidationRunner(registry)

        result = await runner.validate_section("a", {"x": 1}, {"a": {"x": 1}})
        assert [e.path for e in result.errors] == ["a.z"]

    async def test_async_validators_supported(self) -> None:
        registry = ValidationRegistry()

        async def check(data: Any, context: ValidationContext) -> list[ValidationError]:
            return [ValidationError.for_field("a", "x", "async")]

        registry.register_section_validator("a", check)
        result = await ValidationRunner(registry).validate_section("a", {}, {})
        assert result.errors[0].message == "async"

    async def test_none_section_data_skips_section_validators(self) -> None:
        registry = ValidationRegistry()
        registry.register_section_validator("a", required("a", "x"))
        result = await ValidationRunner(registry).validate_section("a", None, {})
        assert result.is_valid


class TestValidatorFailure:
    async def test_exception_becomes_synthetic_error(self) -> None:
        """A crashing validator must not block the others."""
        registry = ValidationRegistry()

        def broken(data: Any, context: ValidationContext) -> None:
            raise RuntimeError("kaput")

        registry.register_section_validator("a", broken)
        registry.register_section_validator("b", required("b", "y"))
        runner = ValidationRunner(registry)

        result = await runner.validate_all({"a": {}, "b": {}})
        by_section = result.by_section()
        assert len(by_section["a"]) == 1
        assert by_section["a"][0].field == "_section"
        assert "broken" in by_section["a"][0].message
        assert "kaput" in by_section["a"][0].message
        assert by_section["b"][0].path == "b.y"

    async def test_cross_field_crash_reported_on_its_section(self) -> None:
        registry = ValidationRegistry()

        def broken(context: ValidationContext) -> None:
            raise KeyError("missing")

        registry.register_cross_field_validator("broken", broken, section="a")
        result = await ValidationRunner(registry).validate_all({})
        assert [e.section for e in result.errors] == ["a"]


class TestValidateAll:
    async def test_skips_absent_sections(self) -> None:
        registry = ValidationRegistry()
        registry.register_section_validator("a", required("a", "x"))
        registry.register_section_validator("b", required("b", "y"))

        result = await ValidationRunner(registry).validate_all({"a": {}})
        assert [e.path for e in result.errors] == ["a.x"]

    async def test_runs_global_validators(self) -> None:
        registry = ValidationRegistry()
        registry.register_global_validator(
            lambda context: [ValidationError(path="", message="incomplete offer")]
        )
        result = await ValidationRunner(registry).validate_all({})
        assert result.errors[0].section == "general"

    async def test_deduplicates_by_default(self) -> None:
        registry = ValidationRegistry()
        duplicate = ValidationError.for_field("a", "x", "same")
        registry.register_section_validator("a", lambda data, context: [duplicate])
        registry.register_cross_field_validator("again", lambda context: duplicate)

        assert len((await ValidationRunner(registry).validate_all({"a": {}})).errors) == 1
        runner = ValidationRunner(registry, deduplicate=False)
        assert len((await runner.validate_all({"a": {}})).errors) == 2

    async def test_context_carries_action(self) -> None:
        registry = ValidationRegistry()
        seen: list[str] = []

        def capture(context: ValidationContext) -> None:
            seen.append(context.action)

        registry.register_cross_field_validator("capture", capture)
        await ValidationRunner(registry, action="AGGIORNAMENTO").validate_all({})
        assert seen == ["AGGIORNAMENTO"]
