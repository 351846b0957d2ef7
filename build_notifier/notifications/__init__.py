"""Email notifications for build events.

This module provides the complete notification pipeline:
- EmailNotifier: listens on an event source and handles each build event
- Subscription: stream of per-event NotificationOutcome values
- normalize / should_notify: email setting policy
- MessageComposer: subject, plaintext and HTML body construction
- TemplateRenderer: Jinja2-based HTML template rendering
- SMTPClient: smtplib-backed mailer
"""

from .composer import MessageComposer, build_subject, build_substitutions, build_text
from .models import (
    EventValidationError,
    MailerError,
    NotificationError,
    NotificationOutcome,
    OutgoingMessage,
    TemplateError,
)
from .policy import normalize, parse_email_setting, should_notify
from .service import EmailNotifier, Subscription
from .smtp_client import SMTPClient, build_mime_message
from .templates import TemplateRenderer

__all__ = [
    # Main service
    "EmailNotifier",
    "Subscription",
    # Models and results
    "NotificationOutcome",
    "OutgoingMessage",
    # Exceptions
    "NotificationError",
    "EventValidationError",
    "TemplateError",
    "MailerError",
    # Policy
    "normalize",
    "parse_email_setting",
    "should_notify",
    # Components
    "MessageComposer",
    "TemplateRenderer",
    "SMTPClient",
    # Utilities
    "build_subject",
    "build_text",
    "build_substitutions",
    "build_mime_message",
]
