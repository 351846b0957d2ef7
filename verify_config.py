#!/usr/bin/env python3
"""Simple script to verify config.example.yaml structure without the package installed."""

import sys
from pathlib import Path

import yaml


def verify_config_structure(config_file: Path = Path("config.example.yaml")) -> bool:
    """Verify a notifier config file has the expected structure."""
    if not config_file.exists():
        print(f"✗ {config_file} not found")
        return False

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        print(f"✗ Failed to parse {config_file}: {e}")
        return False

    errors = []

    if not isinstance(config, dict):
        errors.append("Top level must be a mapping")
        config = {}

    email = config.get("email")
    if email is None:
        errors.append("Missing required key: email")
    elif not isinstance(email, dict):
        errors.append("'email' must be a dictionary")
    else:
        for key in ("host", "port", "from"):
            if key not in email:
                errors.append(f"email missing key: {key}")
        if "port" in email and not isinstance(email["port"], int):
            errors.append("email.port must be an integer")
        if "from" in email and "@" not in str(email["from"]):
            errors.append("email.from must be an email address")

    if "event_name" in config and not isinstance(config["event_name"], str):
        errors.append("'event_name' must be a string")

    logging_section = config.get("logging")
    if logging_section is not None:
        if not isinstance(logging_section, dict):
            errors.append("'logging' must be a dictionary")
        elif logging_section.get("format", "key-value") not in ("json", "key-value"):
            errors.append("logging.format must be 'json' or 'key-value'")

    if errors:
        print(f"✗ {config_file} validation failed:")
        for error in errors:
            print(f"  - {error}")
        return False

    print(f"✓ {config_file} structure is valid")
    return True


if __name__ == "__main__":
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("config.example.yaml")
    sys.exit(0 if verify_config_structure(path) else 1)
