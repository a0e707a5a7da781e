from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Generator, Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from click.testing import CliRunner

    from offerwizard.config import OfferWizardConfig
    from offerwizard.steps import StepRegistry


@pytest.fixture(autouse=True)
def configure_test_logging() -> Generator[None, None, None]:
    """Configure structlog for test environment.

    Logs go to stderr at WARNING level so they neither mix with test
    stdout nor flood the output.
    """
    from offerwizard.logging import configure_logging

    configure_logging(level=logging.WARNING)
    yield


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files.

    Also saves and restores the current working directory to prevent
    tests that use os.chdir() from affecting other tests.
    """
    original_cwd = os.getcwd()
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
    os.chdir(original_cwd)


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove all OFFERWIZARD_ environment variables for clean testing."""
    original_env = os.environ.copy()
    for key in list(os.environ.keys()):
        if key.startswith("OFFERWIZARD_"):
            del os.environ[key]
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def abc_registry() -> StepRegistry:
    """Three steps: A, B depending on A, C depending on B and shown for gas.

    Example:
        >>> calc = AccessibilityCalculator(abc_registry)
        >>> calc.visible_steps({"a": {"market": "electric"}})
        ('a', 'b')
    """
    from offerwizard.steps import FieldEquals, Step, StepRegistry

    return StepRegistry(
        [
            Step(id="a", title="A"),
            Step(id="b", title="B", depends_on=("a",)),
            Step(
                id="c",
                title="C",
                depends_on=("b",),
                visibility=FieldEquals("a.market", "gas"),
            ),
        ]
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 1, 10, 0, tzinfo=UTC)


@pytest.fixture
def fast_config() -> OfferWizardConfig:
    """Configuration with short debounce windows and autosave off."""
    from offerwizard.config import DraftSettings, OfferWizardConfig, ValidationSettings

    return OfferWizardConfig(
        validation=ValidationSettings(debounce_ms=20),
        drafts=DraftSettings(autosave=False, autosave_delay_seconds=0.1),
    )


@pytest.fixture
def valid_identification() -> dict[str, str]:
    return {"PIVA_UTENTE": "ABCDEF12G34H567I", "COD_OFFERTA": "OFFER2024"}


@pytest.fixture
def valid_offer_details() -> dict[str, object]:
    return {
        "TIPO_MERCATO": "01",
        "OFFERTA_SINGOLA": "SI",
        "TIPO_CLIENTE": "01",
        "TIPO_OFFERTA": "01",
        "NOME_OFFERTA": "Luce Fissa",
        "DESCRIZIONE": "Fixed price electricity offer",
        "DURATA": 12,
        "GARANZIE": "NO",
    }
