"""Tests for visibility rules and the VisibilityEvaluator."""

from __future__ import annotations

import pytest

from offerwizard.exceptions import UnknownStepError
from offerwizard.steps import (
    FieldEquals,
    FieldIn,
    NoItemMatches,
    Not,
    Predicate,
    StepRegistry,
    VisibilityEvaluator,
    VisibilityRule,
    all_of,
    any_of,
    get_in,
)


class TestGetIn:
    def test_reads_nested_path(self) -> None:
        data = {"offerDetails": {"TIPO_MERCATO": "03"}}
        assert get_in(data, "offerDetails.TIPO_MERCATO") == "03"

    def test_missing_segment_returns_default(self) -> None:
        assert get_in({}, "offerDetails.TIPO_MERCATO", None) is None
        assert get_in({"offerDetails": "flat"}, "offerDetails.X", "d") == "d"


class TestRules:
    """Tests for the declarative rule records."""

    def test_field_equals(self) -> None:
        rule = FieldEquals("offerDetails.TIPO_MERCATO", "03")
        assert rule({"offerDetails": {"TIPO_MERCATO": "03"}})
        assert not rule({"offerDetails": {"TIPO_MERCATO": "01"}})
        assert not rule({})

    def test_field_equals_none_value_does_not_match_missing(self) -> None:
        assert not FieldEquals("a.b", None)({})
        assert FieldEquals("a.b", None)({"a": {"b": None}})

    def test_field_in(self) -> None:
        rule = FieldIn("m", ("01", "02"))
        assert rule({"m": "02"})
        assert not rule({"m": "03"})
        assert not rule({})

    def test_no_item_matches(self) -> None:
        rule = NoItemMatches("discounts", "TIPOLOGIA", "04")
        assert rule({})
        assert rule({"discounts": [{"TIPOLOGIA": "01"}]})
        assert not rule({"discounts": [{"TIPOLOGIA": "01"}, {"TIPOLOGIA": "04"}]})
        # Not a list: nothing to match
        assert rule({"discounts": {"TIPOLOGIA": "04"}})

    def test_combinators(self) -> None:
        gas = FieldEquals("m", "gas")
        flat = FieldEquals("t", "flat")
        assert all_of(gas, flat)({"m": "gas", "t": "flat"})
        assert not all_of(gas, flat)({"m": "gas", "t": "fixed"})
        assert any_of(gas, flat)({"m": "power", "t": "flat"})
        assert not any_of(gas, flat)({})
        assert Not(gas)({"m": "power"})

    def test_predicate_wraps_function(self) -> None:
        rule = Predicate("has offer code", lambda data: "code" in data)
        assert rule({"code": 1})
        assert rule.describe() == "has offer code"

    def test_describe_is_readable(self) -> None:
        rule = all_of(FieldEquals("m", "01"), Not(FieldEquals("t", "03")))
        assert rule.describe() == "(m == '01') and (not (t == '03'))"

    def test_rules_satisfy_protocol(self) -> None:
        assert isinstance(FieldEquals("a", 1), VisibilityRule)
        assert isinstance(any_of(), VisibilityRule)


class TestVisibilityEvaluator:
    def test_step_without_rule_always_visible(self, abc_registry: StepRegistry) -> None:
        evaluator = VisibilityEvaluator(abc_registry)
        assert evaluator.is_visible("a", {})
        assert evaluator.is_visible("b", {"anything": 1})

    def test_rule_reads_other_sections(self, abc_registry: StepRegistry) -> None:
        evaluator = VisibilityEvaluator(abc_registry)
        assert not evaluator.is_visible("c", {"a": {"market": "electric"}})
        assert evaluator.is_visible("c", {"a": {"market": "gas"}})

    def test_deterministic(self, abc_registry: StepRegistry) -> None:
        evaluator = VisibilityEvaluator(abc_registry)
        data = {"a": {"market": "gas"}}
        assert {evaluator.is_visible("c", data) for _ in range(5)} == {True}
        assert data == {"a": {"market": "gas"}}

    def test_unknown_step_raises(self, abc_registry: StepRegistry) -> None:
        with pytest.raises(UnknownStepError):
            VisibilityEvaluator(abc_registry).is_visible("zzz", {})
