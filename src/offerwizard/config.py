"""Layered settings: init arguments, environment, project YAML, user YAML."""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from offerwizard.constants import (
    DEFAULT_AUTOSAVE_DELAY_SECONDS,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_DRAFT_PATH,
    PROJECT_CONFIG_FILENAME,
)
from offerwizard.exceptions import ConfigError
from offerwizard.logging import get_logger

__all__ = [
    "OfferWizardConfig",
    "ValidationSettings",
    "DraftSettings",
    "load_config",
    "get_user_config_path",
]

logger = get_logger(__name__)


class ValidationSettings(BaseModel):
    """Settings for the validation orchestrator.

    Attributes:
        debounce_ms: Quiescence window after the last edit before a
            validation pass runs.
        mode: "section" re-validates only the edited sections and merges
            their errors; "full" re-validates the whole form and replaces
            the error map.
        validate_on_change: Schedule a debounced pass on every edit.
        deduplicate: Drop repeated (path, message) pairs in whole-form passes.
    """

    debounce_ms: int = Field(default=DEFAULT_DEBOUNCE_MS, ge=0, le=10000)
    mode: Literal["section", "full"] = "section"
    validate_on_change: bool = True
    deduplicate: bool = True

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


class DraftSettings(BaseModel):
    """Settings for draft persistence.

    Attributes:
        path: JSON file used by the file draft store.
        autosave: Save the draft automatically after a quiet period.
        autosave_delay_seconds: Quiet period before an autosave.
    """

    path: Path = Field(default_factory=lambda: Path(DEFAULT_DRAFT_PATH))
    autosave: bool = True
    autosave_delay_seconds: float = Field(
        default=DEFAULT_AUTOSAVE_DELAY_SECONDS, ge=0.1, le=600.0
    )


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    """Top-level mapping of a YAML config file; empty when the file is absent.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.is_file():
        return {}
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(message=f"Invalid YAML in {path}: {e}") from e
    if loaded is None:
        logger.warning("config_file_empty", path=str(path))
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(
            message=f"Config file {path} must contain a mapping",
            value=type(loaded).__name__,
        )
    return loaded


class YamlConfigSource(PydanticBaseSettingsSource):
    """Settings source backed by one YAML file."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_file: Path) -> None:
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._data = _read_yaml_mapping(yaml_file)

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._data


class OfferWizardConfig(BaseSettings):
    """Root configuration object containing all offer wizard settings."""

    model_config = SettingsConfigDict(
        env_prefix="OFFERWIZARD_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    drafts: DraftSettings = Field(default_factory=DraftSettings)
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Earlier sources win: init arguments, OFFERWIZARD_* variables, the
        project file, then the user file.
        """
        project_config_path = _project_config_path.get() or (
            Path.cwd() / PROJECT_CONFIG_FILENAME
        )
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, project_config_path),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


# Explicit project file for the OfferWizardConfig() built inside load_config()
_project_config_path: ContextVar[Path | None] = ContextVar(
    "offerwizard_project_config_path", default=None
)


def get_user_config_path() -> Path:
    """Location of the per-user config file, ``~/.config/offerwizard/config.yaml``."""
    return Path.home() / ".config" / "offerwizard" / "config.yaml"


def load_config(config_path: Path | None = None) -> OfferWizardConfig:
    """Build the merged configuration.

    Args:
        config_path: Project config file to read instead of
            ``./offerwizard.yaml``.

    Raises:
        ConfigError: If a file is malformed or a value fails validation.
            ``field`` is the dotted path of the first offending setting.
    """
    if config_path is not None and not config_path.exists():
        logger.info("config_file_missing", path=str(config_path))

    token = _project_config_path.set(config_path)
    try:
        return OfferWizardConfig()
    except ValidationError as e:
        first_error = e.errors()[0]
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=".".join(str(part) for part in first_error["loc"]),
            value=first_error.get("input"),
        ) from e
    finally:
        _project_config_path.reset(token)
