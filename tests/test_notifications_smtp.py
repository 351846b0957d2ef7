"""Unit tests for the SMTP mailer.

Tests the SMTPClient for:
- Connection handling (SMTP and SMTP_SSL)
- MIME message construction
- Error handling and exceptions
- Connection cleanup
"""

import smtplib
from unittest.mock import MagicMock, Mock

import pytest

from build_notifier.config.models import SMTPTransport
from build_notifier.notifications.models import MailerError, OutgoingMessage
from build_notifier.notifications.smtp_client import SMTPClient, build_mime_message


@pytest.fixture
def message():
    return OutgoingMessage(
        sender="screwdriver@example.com",
        to=["a@example.com", "b@example.com"],
        subject="FAILURE - Screwdriver p j #42",
        text="Build status: FAILURE\nBuild link:http://x/42",
        html="<html><body>FAILURE</body></html>",
    )


@pytest.fixture
def transport():
    return SMTPTransport(host="smtp.example.com", port=25)


@pytest.fixture
def mock_smtp():
    smtp = MagicMock()
    smtp.send_message.return_value = {}
    return smtp


def test_smtp_client_initialization():
    client = SMTPClient()

    assert client.smtp_factory is smtplib.SMTP
    assert client.smtp_ssl_factory is smtplib.SMTP_SSL


def test_build_mime_message(message):
    mime = build_mime_message(message)

    assert mime["Subject"] == "FAILURE - Screwdriver p j #42"
    assert mime["From"] == "screwdriver@example.com"
    assert mime["To"] == "a@example.com, b@example.com"
    assert mime.is_multipart()

    parts = {part.get_content_type(): part.get_content() for part in mime.iter_parts()}
    assert parts["text/plain"].rstrip("\n") == "Build status: FAILURE\nBuild link:http://x/42"
    assert "<body>FAILURE</body>" in parts["text/html"]


def test_send_plain_smtp(message, transport, mock_smtp):
    mock_factory = Mock(return_value=mock_smtp)

    client = SMTPClient(smtp_factory=mock_factory)
    result = client.send(message, transport)

    # Should connect to configured host and port
    mock_factory.assert_called_once_with("smtp.example.com", 25)

    # Should send a MIME message addressed to every recipient
    mock_smtp.send_message.assert_called_once()
    sent = mock_smtp.send_message.call_args.args[0]
    assert sent["To"] == "a@example.com, b@example.com"

    # No STARTTLS or login for a plain transport
    mock_smtp.starttls.assert_not_called()
    mock_smtp.login.assert_not_called()

    # Should quit
    mock_smtp.quit.assert_called_once()
    assert result == {}


def test_send_implicit_tls(message, mock_smtp):
    mock_ssl_factory = Mock(return_value=mock_smtp)
    mock_factory = Mock()

    client = SMTPClient(smtp_factory=mock_factory, smtp_ssl_factory=mock_ssl_factory)
    client.send(message, SMTPTransport(host="smtp.example.com", port=465))

    mock_ssl_factory.assert_called_once()
    assert mock_ssl_factory.call_args.args == ("smtp.example.com", 465)
    assert "context" in mock_ssl_factory.call_args.kwargs
    mock_factory.assert_not_called()
    mock_smtp.quit.assert_called_once()


def test_send_returns_refused_recipients(message, transport, mock_smtp):
    mock_smtp.send_message.return_value = {"b@example.com": (550, b"No such user")}

    client = SMTPClient(smtp_factory=Mock(return_value=mock_smtp))

    assert client.send(message, transport) == {"b@example.com": (550, b"No such user")}


def test_send_smtp_error_raises_mailer_error(message, transport, mock_smtp):
    mock_smtp.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

    client = SMTPClient(smtp_factory=Mock(return_value=mock_smtp))

    with pytest.raises(MailerError) as exc_info:
        client.send(message, transport)

    assert "SMTP error" in str(exc_info.value)
    # Connection is still closed
    mock_smtp.quit.assert_called_once()


def test_send_connection_error_raises_mailer_error(message, transport):
    mock_factory = Mock(side_effect=ConnectionRefusedError("refused"))

    client = SMTPClient(smtp_factory=mock_factory)

    with pytest.raises(MailerError) as exc_info:
        client.send(message, transport)

    assert "Network error" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)


def test_quit_failure_is_not_fatal(message, transport, mock_smtp):
    mock_smtp.quit.side_effect = smtplib.SMTPServerDisconnected("gone")

    client = SMTPClient(smtp_factory=Mock(return_value=mock_smtp))

    # Delivery succeeded, so a failing quit only logs a warning
    assert client.send(message, transport) == {}
