"""SMTP client wrapper for email delivery.

This module provides a thin wrapper around Python's smtplib that turns an
OutgoingMessage into a multipart MIME message and delivers it to the
configured mail server.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Any, Callable, Dict, Optional, Protocol

from build_notifier.config.models import SMTPTransport

from .models import MailerError, OutgoingMessage

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


class Mailer(Protocol):
    """Anything that can deliver an OutgoingMessage."""

    def send(self, message: OutgoingMessage, transport: SMTPTransport) -> Any:
        ...


def build_mime_message(message: OutgoingMessage) -> EmailMessage:
    """Build a text + HTML alternative EmailMessage from an OutgoingMessage."""
    options = message.as_mail_options()
    mime = EmailMessage()
    mime["Subject"] = options["subject"]
    mime["From"] = options["from"]
    mime["To"] = ", ".join(options["to"])

    mime.set_content(options["text"])
    mime.add_alternative(options["html"], subtype="html")
    return mime


class SMTPClient:
    """Mailer backed by smtplib.

    Opens one connection per message and always closes it. Port 465 uses
    implicit TLS; any other port connects in plain SMTP.
    """

    def __init__(
        self,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        """Initialize SMTP client with optional factory injection.

        Args:
            smtp_factory: Factory for SMTP instances (for mocking)
            smtp_ssl_factory: Factory for SMTP_SSL instances (for mocking)
        """
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(self, message: OutgoingMessage, transport: SMTPTransport) -> Dict[str, Any]:
        """Send a message via SMTP.

        Args:
            message: Composed message to deliver
            transport: Mail server host and port

        Returns:
            Recipients the server refused, keyed by address (empty when
            every recipient was accepted)

        Raises:
            MailerError: If delivery fails
        """
        mime = build_mime_message(message)
        smtp = None
        try:
            if transport.port == IMPLICIT_TLS_PORT:
                logger.debug(
                    f"Connecting to {transport.host}:{transport.port} with implicit TLS"
                )
                context = ssl.create_default_context()
                smtp = self.smtp_ssl_factory(
                    transport.host, transport.port, context=context
                )
            else:
                logger.debug(f"Connecting to {transport.host}:{transport.port}")
                smtp = self.smtp_factory(transport.host, transport.port)

            refused = smtp.send_message(mime)
            logger.debug(f"Message sent to {mime['To']}")
            return refused or {}

        except smtplib.SMTPException as e:
            error_msg = f"SMTP error during message delivery: {e}"
            logger.error(error_msg)
            raise MailerError(error_msg) from e
        except OSError as e:
            error_msg = f"Network error during SMTP connection: {e}"
            logger.error(error_msg)
            raise MailerError(error_msg) from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except Exception as e:
                    logger.warning(f"Error closing SMTP connection: {e}")
