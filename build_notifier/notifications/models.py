"""Data models and exceptions for the notification pipeline.

This module defines the outgoing message, the per-event outcome, and the
exceptions raised while turning a build event into an email.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from build_notifier.events.exceptions import EventValidationError
from build_notifier.events.models import BuildStatus


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class TemplateError(NotificationError):
    """Raised when the HTML template is missing or fails to render."""

    pass


class MailerError(NotificationError):
    """Raised when the mailer rejects or fails to send a message."""

    pass


SENT = "sent"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass(frozen=True)
class OutgoingMessage:
    """Fully specified email ready to hand to a mailer."""

    sender: str
    to: List[str]
    subject: str
    text: str
    html: str

    def as_mail_options(self) -> Dict[str, Any]:
        """Return the message as a ``from``/``to``/``subject``/``text``/``html`` mapping."""
        return {
            "from": self.sender,
            "to": list(self.to),
            "subject": self.subject,
            "text": self.text,
            "html": self.html,
        }


@dataclass
class NotificationOutcome:
    """Settled result of handling one build event.

    Attributes:
        status: "sent", "skipped" or "failed"
        build_status: Status carried by the event, when it validated
        build_id: Build id carried by the event, when present
        reason: Why the event was skipped or failed
        error: Exception that failed the event
        message: The composed message, when composition happened
        delivery: Whatever the mailer returned for a sent message
    """

    status: str
    build_status: Optional[BuildStatus] = None
    build_id: Optional[int] = None
    reason: Optional[str] = None
    error: Optional[Exception] = field(default=None, repr=False)
    message: Optional[OutgoingMessage] = field(default=None, repr=False)
    delivery: Any = field(default=None, repr=False)

    def is_success(self) -> bool:
        return self.status == SENT

    def is_skipped(self) -> bool:
        return self.status == SKIPPED

    def is_failure(self) -> bool:
        return self.status == FAILED

    def raise_for_error(self) -> None:
        """Re-raise the error that failed this event, if any."""
        if self.error is not None:
            raise self.error


__all__ = [
    "NotificationError",
    "EventValidationError",
    "TemplateError",
    "MailerError",
    "OutgoingMessage",
    "NotificationOutcome",
    "SENT",
    "SKIPPED",
    "FAILED",
]
