"""
Configuration management for the grimoire registry tools.

Settings come from, in increasing priority: an optional grimoire.yaml file,
GRIMOIRE_* environment variables, and explicit overrides (CLI flags).
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_CONFIG_FILENAME = "grimoire.yaml"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Registry settings."""

    # Registry layout
    registry_root: Path = Path("packages")

    # Validation rules
    min_topics: int = Field(default=5, ge=0)
    topic_extensions: list[str] = [".md", ".markdown"]

    # Execution
    workers: int = Field(default=1, ge=1)
    log_level: str = "INFO"

    model_config = {"env_prefix": "GRIMOIRE_"}

    @field_validator("topic_extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level


def load_config(config_path: Path) -> dict[str, Any]:
    """
    Load settings from a YAML file.

    Args:
        config_path: Path to grimoire.yaml

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file isn't valid YAML or doesn't contain a mapping
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return config


def get_settings(config_path: Path | None = None, **overrides: Any) -> Settings:
    """
    Build settings from config file, environment and overrides.

    Args:
        config_path: YAML config file; defaults to ./grimoire.yaml when present
        **overrides: Explicit values; None values are ignored

    Returns:
        Settings instance
    """
    if config_path is None and Path(DEFAULT_CONFIG_FILENAME).is_file():
        config_path = Path(DEFAULT_CONFIG_FILENAME)

    values = load_config(config_path) if config_path is not None else {}

    # Environment wins over the file; only fields actually set by GRIMOIRE_* count
    values.update(Settings().model_dump(exclude_unset=True))
    values.update({key: value for key, value in overrides.items() if value is not None})

    return Settings(**values)
