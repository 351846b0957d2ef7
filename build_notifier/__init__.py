"""Build email notifier: turns CI/CD build events into email notifications."""

from build_notifier.config import ConfigError, NotifierConfig, validate_config
from build_notifier.events import BuildEvent, BuildStatus, EventBus, validate_event
from build_notifier.notifications import EmailNotifier, NotificationOutcome, Subscription

__version__ = "1.0.0"

__all__ = [
    "EmailNotifier",
    "Subscription",
    "NotificationOutcome",
    "EventBus",
    "BuildEvent",
    "BuildStatus",
    "NotifierConfig",
    "ConfigError",
    "validate_config",
    "validate_event",
]
