"""Build events: models, validation and the in-process event bus."""

from .bus import EventBus, EventSource
from .exceptions import EventValidationError
from .models import (
    DEFAULT_STATUSES,
    STATUS_COLORS,
    AddressList,
    BuildEvent,
    BuildSettings,
    BuildStatus,
    EmailSetting,
    SingleAddress,
    StructuredEmailSetting,
)
from .validation import validate_event

__all__ = [
    # Models
    "BuildEvent",
    "BuildSettings",
    "BuildStatus",
    "EmailSetting",
    "SingleAddress",
    "AddressList",
    "StructuredEmailSetting",
    "STATUS_COLORS",
    "DEFAULT_STATUSES",
    # Validation
    "validate_event",
    "EventValidationError",
    # Event source
    "EventBus",
    "EventSource",
]
