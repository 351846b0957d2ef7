"""Environment variable loading and validation."""

import os
from typing import Any, Dict

from .exceptions import ConfigError

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_LOG_FORMATS = ["json", "key-value"]


def load_environment_overrides() -> Dict[str, Any]:
    """
    Load configuration overrides from environment variables.

    Recognised environment variables (all optional):
    - SMTP_HOST: Mail server hostname
    - SMTP_PORT: Mail server port (1-65535)
    - SMTP_FROM: Sender address for outgoing messages
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_FORMAT: Override log format (json, key-value)
    - NOTIFIER_EVENT_NAME: Host event the notifier listens on

    Returns:
        Nested dictionary shaped like the YAML configuration, containing
        only the keys that were set

    Raises:
        ConfigError: If a variable is set to an invalid value
    """
    errors = []
    overrides: Dict[str, Any] = {}
    email: Dict[str, Any] = {}
    logging_section: Dict[str, Any] = {}

    smtp_host = os.getenv("SMTP_HOST")
    smtp_port_str = os.getenv("SMTP_PORT")
    smtp_from = os.getenv("SMTP_FROM")
    log_level = os.getenv("LOG_LEVEL")
    log_format = os.getenv("LOG_FORMAT")
    event_name = os.getenv("NOTIFIER_EVENT_NAME")

    if smtp_host:
        email["host"] = smtp_host

    # Validate SMTP_PORT is numeric and in valid range
    if smtp_port_str:
        try:
            smtp_port = int(smtp_port_str)
            if smtp_port < 1 or smtp_port > 65535:
                errors.append(
                    f"Invalid SMTP_PORT: {smtp_port}. Must be between 1 and 65535."
                )
            else:
                email["port"] = smtp_port
        except ValueError:
            errors.append(
                f"Invalid SMTP_PORT: '{smtp_port_str}'. Must be a valid integer."
            )

    if smtp_from:
        email["from"] = smtp_from.strip()

    if log_level:
        if log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        else:
            logging_section["level"] = log_level.upper()

    if log_format:
        if log_format.lower() not in VALID_LOG_FORMATS:
            errors.append(
                f"Invalid LOG_FORMAT: '{log_format}'. Must be one of: {', '.join(VALID_LOG_FORMATS)}"
            )
        else:
            logging_section["format"] = log_format.lower()

    if errors:
        raise ConfigError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fix the listed values",
                "Verify SMTP_PORT is a number between 1 and 65535",
            ],
        )

    if email:
        overrides["email"] = email
    if logging_section:
        overrides["logging"] = logging_section
    if event_name:
        overrides["event_name"] = event_name.strip()

    return overrides
