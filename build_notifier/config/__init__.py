"""Configuration management module for the build email notifier."""

from .environment import load_environment_overrides
from .exceptions import ConfigError
from .loader import load_config, validate_config
from .models import (
    AppConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    NotifierConfig,
    SMTPTransport,
)

__all__ = [
    # Loader functions
    "load_config",
    "validate_config",
    "load_environment_overrides",
    # Configuration models
    "AppConfig",
    "NotifierConfig",
    "LoggingConfig",
    "SMTPTransport",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigError",
]
