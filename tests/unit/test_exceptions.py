"""Tests for the offer wizard exception hierarchy."""

from __future__ import annotations

from pathlib import Path

import pytest

from offerwizard.exceptions import (
    ConfigError,
    DependencyCycleError,
    DuplicateStepError,
    NavigationDeniedError,
    OfferWizardError,
    PersistenceError,
    StepRegistryError,
    UnknownStepError,
)


@pytest.mark.parametrize(
    "error",
    [
        ConfigError("bad", field="verbosity", value="loud"),
        UnknownStepError("x"),
        DuplicateStepError("x"),
        DependencyCycleError(["a", "b", "a"]),
        NavigationDeniedError("x", "not_visible"),
        PersistenceError("disk full", path=Path("draft.json")),
    ],
)
def test_all_errors_share_base_and_message(error: OfferWizardError) -> None:
    assert isinstance(error, OfferWizardError)
    assert error.message
    assert str(error) == error.message


def test_registry_errors_share_base() -> None:
    for error in (UnknownStepError("x"), DuplicateStepError("x"), DependencyCycleError([])):
        assert isinstance(error, StepRegistryError)


def test_unknown_step_mentions_referencing_step() -> None:
    error = UnknownStepError("ghost", referenced_by="offer-basic")
    assert error.step_id == "ghost"
    assert "offer-basic" in error.message


def test_cycle_message_lists_path() -> None:
    error = DependencyCycleError(["a", "b", "a"])
    assert error.cycle == ("a", "b", "a")
    assert "a -> b -> a" in error.message


def test_navigation_denied_default_message() -> None:
    error = NavigationDeniedError("dual-offers", "not_visible")
    assert error.reason == "not_visible"
    assert "dual-offers" in error.message
