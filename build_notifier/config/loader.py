"""Configuration loader for the build email notifier."""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from .environment import load_environment_overrides
from .exceptions import ConfigError
from .models import AppConfig, NotifierConfig


def validate_config(raw: Any) -> NotifierConfig:
    """
    Validate mail server settings for the notifier.

    Args:
        raw: Mapping with ``host``, ``port`` and ``from`` keys, or an
            already validated NotifierConfig

    Returns:
        Frozen NotifierConfig

    Raises:
        ConfigError: If any field is missing, mistyped or invalid
    """
    if isinstance(raw, NotifierConfig):
        return raw

    if not isinstance(raw, Mapping):
        raise ConfigError(
            "Invalid config for email notifications",
            errors=[f"Expected a mapping, got {type(raw).__name__}"],
        )

    try:
        return NotifierConfig.model_validate(dict(raw))
    except ValidationError as e:
        raise ConfigError.from_validation_error(
            "Invalid config for email notifications",
            e,
            suggestions=[
                "Provide host (string), port (integer) and from (email address)",
            ],
        ) from e


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load and validate configuration from a YAML file and environment variables.

    Implements fallback logic for config file location:
    1. Use provided config_path if given
    2. Try config.yaml in current directory
    3. Try ./config/config.yaml
    4. Fail with helpful error message

    Environment variables override values from the file.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Validated AppConfig

    Raises:
        ConfigError: If configuration is invalid or file not found
    """
    config_file = _find_config_file(config_path)

    try:
        with open(config_file, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            suggestions=[
                f"Ensure {config_file} is readable",
                "Check file permissions",
            ],
        ) from e

    if config_dict is None:
        config_dict = {}

    if not isinstance(config_dict, dict):
        raise ConfigError(
            "Configuration file must contain a mapping at the top level",
            suggestions=["Copy config.example.yaml to config.yaml"],
        )

    merged = _merge(config_dict, load_environment_overrides())

    try:
        return AppConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError.from_validation_error(
            "Configuration validation failed",
            e,
            suggestions=[
                "Review config.example.yaml for correct format",
                "Check that email.host, email.port and email.from are present",
                "Verify field types match the expected schema",
            ],
        ) from e


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overrides into a copy of base."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _find_config_file(config_path: Optional[Path] = None) -> Path:
    """
    Find configuration file using fallback logic.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Path to configuration file

    Raises:
        ConfigError: If no config file is found
    """
    if config_path:
        if not config_path.exists():
            raise ConfigError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[
                    f"Ensure {config_path} exists",
                    "Check the path and try again",
                ],
            )
        return config_path

    candidates = [
        Path("config.yaml"),
        Path("config") / "config.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    raise ConfigError(
        "Configuration file not found",
        errors=[
            "Tried: config.yaml",
            "Tried: config/config.yaml",
        ],
        suggestions=[
            "Copy config.example.yaml to config.yaml",
            "Use --config flag to specify a custom location",
        ],
    )
