"""Email notifier for build events.

This module provides the EmailNotifier that listens on the host's event
source and runs each delivered build event through the notification
pipeline: validation, email setting normalization, status filtering,
message composition and delivery through the mailer.

Each event settles as its own NotificationOutcome. Subscribing returns a
Subscription that yields those outcomes for as long as it stays open.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from build_notifier.config.loader import validate_config
from build_notifier.config.models import NotifierConfig
from build_notifier.events.bus import EventSource
from build_notifier.events.exceptions import EventValidationError
from build_notifier.events.models import BuildEvent
from build_notifier.events.validation import validate_event
from build_notifier.logging import get_logger
from build_notifier.logging.context import log_context

from .composer import MessageComposer, Renderer
from .models import (
    FAILED,
    SENT,
    SKIPPED,
    MailerError,
    NotificationError,
    NotificationOutcome,
    OutgoingMessage,
    TemplateError,
)
from .policy import normalize, should_notify
from .smtp_client import Mailer, SMTPClient

logger = get_logger(__name__, component="notifier")

OutcomeCallback = Callable[[NotificationOutcome], Union[None, Awaitable[None]]]

_CLOSED = object()


class Subscription:
    """Live registration of a notifier on its event source.

    Async-iterate to receive one NotificationOutcome per delivered event,
    in delivery order, until ``close()`` is called. Outcomes are buffered,
    so events handled before the consumer starts iterating are not lost.
    """

    def __init__(
        self,
        notifier: "EmailNotifier",
        on_outcome: Optional[OutcomeCallback] = None,
    ):
        self.notifier = notifier
        self.on_outcome = on_outcome
        self._outcomes: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def _handle(self, payload: Any) -> None:
        outcome = await self.notifier.handle_event(payload)
        if not self._closed:
            self._outcomes.put_nowait(outcome)
        if self.on_outcome is not None:
            result = self.on_outcome(outcome)
            if inspect.isawaitable(result):
                await result

    async def next_outcome(self) -> Optional[NotificationOutcome]:
        """Wait for the next outcome. Returns None once the subscription is closed."""
        if self._closed and self._outcomes.empty():
            return None
        item = await self._outcomes.get()
        if item is _CLOSED:
            # Leave the marker for any other waiter
            self._outcomes.put_nowait(_CLOSED)
            return None
        return item

    def close(self) -> None:
        """Stop listening. Outcomes already buffered can still be consumed."""
        if self._closed:
            return
        self._closed = True
        off = getattr(self.notifier.event_source, "off", None)
        if off is not None:
            off(self.notifier.event_name, self._handle)
        self._outcomes.put_nowait(_CLOSED)
        self.notifier.logger.info(
            f"Stopped listening on '{self.notifier.event_name}'",
            extra={"event": "notifier.stopped", "event_name": self.notifier.event_name},
        )

    def __aiter__(self):
        return self

    async def __anext__(self) -> NotificationOutcome:
        outcome = await self.next_outcome()
        if outcome is None:
            raise StopAsyncIteration
        return outcome

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class EmailNotifier:
    """Forwards qualifying build events as email notifications.

    Coordinates the per-event flow:
    1. Validate the event payload
    2. Normalize the build's email setting
    3. Skip when the status is not watched or there are no recipients
    4. Compose subject, plaintext and HTML bodies
    5. Hand the message and transport parameters to the mailer

    Only an invalid configuration is fatal, and it is raised from the
    constructor. Every other error is confined to the event that caused it.
    """

    def __init__(
        self,
        config: Union[NotifierConfig, dict],
        event_source: EventSource,
        event_name: str,
        renderer: Optional[Renderer] = None,
        mailer: Optional[Mailer] = None,
        logger_instance: Optional[logging.LoggerAdapter] = None,
    ):
        """Initialize the notifier.

        Args:
            config: Mapping with host, port and from, or a NotifierConfig
            event_source: Host event source exposing ``on(name, handler)``
            event_name: Event the notifier listens on
            renderer: HTML template renderer (creates default if None)
            mailer: Mailer used for delivery (creates SMTPClient if None)
            logger_instance: Logger instance (uses module logger if None)

        Raises:
            ConfigError: If the configuration is invalid
        """
        self.config = validate_config(config)
        self.event_source = event_source
        self.event_name = event_name
        self.composer = MessageComposer(renderer)
        self.mailer = mailer or SMTPClient()
        self.logger = logger_instance or logger

    def start(self, on_outcome: Optional[OutcomeCallback] = None) -> Subscription:
        """Register a listener for ``event_name`` and return immediately.

        Args:
            on_outcome: Optional callback (sync or async) invoked with each
                event's outcome

        Returns:
            Subscription yielding one outcome per delivered event
        """
        subscription = Subscription(self, on_outcome)
        self.event_source.on(self.event_name, subscription._handle)
        self.logger.info(
            f"Listening for '{self.event_name}' events",
            extra={"event": "notifier.started", "event_name": self.event_name},
        )
        return subscription

    async def handle_event(self, payload: Any) -> NotificationOutcome:
        """Run one delivered payload through the notification pipeline.

        Never raises for per-event problems; they settle as a failed outcome.

        Args:
            payload: Raw build event payload

        Returns:
            NotificationOutcome for this event
        """
        with log_context(event_name=self.event_name):
            try:
                event = validate_event(payload)
            except EventValidationError as e:
                self.logger.warning(
                    f"Rejected build event: {e}",
                    extra={"event": "notification.invalid_event", "fields": e.fields},
                )
                return NotificationOutcome(status=FAILED, reason="invalid_event", error=e)

            with log_context(build_id=event.build_id, build_status=event.status.value):
                try:
                    return await self._process(event)
                except Exception as e:
                    # Unexpected errors are still scoped to this event
                    self.logger.error(
                        f"Unexpected error handling build event: {e}",
                        exc_info=True,
                    )
                    error = e
                    if not isinstance(e, NotificationError):
                        error = NotificationError(f"Unexpected error: {e}")
                        error.__cause__ = e
                    return NotificationOutcome(
                        status=FAILED,
                        build_status=event.status,
                        build_id=event.build_id,
                        reason="unexpected_error",
                        error=error,
                    )

    async def _process(self, event: BuildEvent) -> NotificationOutcome:
        setting = normalize(event.settings.email)

        if not should_notify(setting, event.status):
            self.logger.info(
                f"Skipping notification - {event.status.value} is not watched",
                extra={"event": "notification.skip", "reason": "status_not_watched"},
            )
            return NotificationOutcome(
                status=SKIPPED,
                build_status=event.status,
                build_id=event.build_id,
                reason="status_not_watched",
            )

        if not setting.addresses:
            self.logger.info(
                "Skipping notification - no recipients configured",
                extra={"event": "notification.skip", "reason": "no_recipients"},
            )
            return NotificationOutcome(
                status=SKIPPED,
                build_status=event.status,
                build_id=event.build_id,
                reason="no_recipients",
            )

        try:
            message = self.composer.compose(event, setting, self.config.sender)
        except TemplateError as e:
            self.logger.error(
                f"Template rendering failed: {e}",
                extra={"event": "notification.template.failure"},
            )
            return NotificationOutcome(
                status=FAILED,
                build_status=event.status,
                build_id=event.build_id,
                reason="template_error",
                error=e,
            )

        try:
            delivery = await self._deliver(message)
        except MailerError as e:
            self._log_send_failure(message, e)
            return NotificationOutcome(
                status=FAILED,
                build_status=event.status,
                build_id=event.build_id,
                reason="mailer_error",
                error=e,
                message=message,
            )

        self.logger.info(
            f"Notification sent: {message.subject} to {', '.join(message.to)}",
            extra={"event": "notification.send.success", "recipients": message.to},
        )
        return NotificationOutcome(
            status=SENT,
            build_status=event.status,
            build_id=event.build_id,
            message=message,
            delivery=delivery,
        )

    async def _deliver(self, message: OutgoingMessage) -> Any:
        """Hand the message to the mailer; blocking mailers run off the loop.

        Raises:
            MailerError: If the mailer fails, whatever it raised
        """
        transport = self.config.transport
        send = self.mailer.send
        try:
            if inspect.iscoroutinefunction(send):
                result = await send(message, transport)
            else:
                result = await asyncio.to_thread(send, message, transport)
            if inspect.isawaitable(result):
                result = await result
            return result
        except MailerError:
            raise
        except Exception as e:
            raise MailerError(f"Mailer failed: {e}") from e

    def _log_send_failure(self, message: OutgoingMessage, error: MailerError) -> None:
        self.logger.error(
            f"Delivery failed for '{message.subject}': {error}",
            extra={
                "event": "notification.send.failure",
                "recipients": message.to,
                "error_type": type(error.__cause__ or error).__name__,
            },
        )
