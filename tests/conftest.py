"""Shared fixtures for build email notifier tests."""

import pytest

from build_notifier.config.models import NotifierConfig
from build_notifier.logging.context import clear_log_context

ENV_VARS = [
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_FROM",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "NOTIFIER_EVENT_NAME",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove notifier environment variables so tests see only what they set."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def raw_config():
    """Raw mail server configuration as the host passes it."""
    return {
        "host": "smtp.example.com",
        "port": 25,
        "from": "screwdriver@example.com",
    }


@pytest.fixture
def notifier_config(raw_config):
    """Validated mail server configuration."""
    return NotifierConfig.model_validate(raw_config)


@pytest.fixture
def event_payload():
    """Build event that should produce a notification."""
    return {
        "settings": {
            "email": {
                "addresses": ["dev-team@example.com", "lead@example.com"],
                "statuses": ["FAILURE"],
            },
            "slack": "ignored-by-email",
        },
        "status": "FAILURE",
        "pipelineName": "screwdriver-cd/ui",
        "jobName": "main",
        "buildId": 42,
        "buildLink": "https://cd.screwdriver.cd/pipelines/7/builds/42",
    }
