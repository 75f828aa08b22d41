"""Settings for doc-implementors.

Values come from (highest priority first) explicit keyword arguments,
``DOC_IMPLEMENTORS_*`` environment variables, a ``.env`` file, and the
defaults below. ``Settings.from_yaml`` loads the same fields from a YAML
mapping.

Examples:
    >>> from doc_implementors.config import Settings
    >>> settings = Settings(doc_root="target/doc", merge_policy="append")
    >>> settings.merge_policy
    <MergePolicy.APPEND: 'append'>

Tags:
    settings, configuration, pydantic, environment

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from doc_implementors.errors import ConfigError
from doc_implementors.registry import MergePolicy

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Runtime settings.

    Fields
    ──────
    doc_root      : Generated documentation root (holds ``implementors/``)
    merge_policy  : How a registry merges a namespace it already holds
    log_level     : Structlog log level
    log_json      : JSON log lines; ``None`` picks JSON when stderr is not a tty
    """

    model_config = SettingsConfigDict(
        env_prefix="DOC_IMPLEMENTORS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    doc_root: Path = Field(
        default_factory=lambda: Path("doc"),
        description="Generated documentation root directory",
    )
    merge_policy: MergePolicy = MergePolicy.REPLACE
    log_level: str = "INFO"
    log_json: bool | None = None

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {value!r}")
        return level

    @classmethod
    def from_yaml(cls, yaml_path: Path | str) -> Settings:
        """Load settings from a YAML file.

        Args:
            yaml_path: Path to a YAML mapping of setting names to values

        Returns:
            Settings instance

        Raises:
            ConfigError: File unreadable, not a mapping, or values invalid
        """
        path = Path(yaml_path)
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot load settings from {path}", cause=e).with_context(
                path=str(path)
            )

        if not isinstance(data, dict):
            raise ConfigError(f"Settings file {path} must contain a mapping").with_context(
                path=str(path)
            )
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create settings from a dictionary, wrapping validation failures."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings: {e.error_count()} error(s)", cause=e)

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a JSON-friendly dictionary."""
        return {
            "doc_root": str(self.doc_root),
            "merge_policy": self.merge_policy.value,
            "log_level": self.log_level,
            "log_json": self.log_json,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, built once from the environment."""
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e.error_count()} error(s)", cause=e)


def reset_settings() -> None:
    """Drop cached settings (for testing)."""
    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings"]
