"""Integration tests for the notification pipeline.

Runs build events from the event bus through the real template renderer
and SMTP client, with only the smtplib connection mocked.
"""

import asyncio
from unittest.mock import MagicMock, Mock

import pytest

from build_notifier.events import EventBus
from build_notifier.notifications import EmailNotifier, SMTPClient

EVENT_NAME = "build_status"


@pytest.fixture
def mock_smtp():
    smtp = MagicMock()
    smtp.send_message.return_value = {}
    return smtp


@pytest.fixture
def smtp_factory(mock_smtp):
    return Mock(return_value=mock_smtp)


def run_events(raw_config, smtp_factory, payloads):
    """Emit payloads on a fresh bus and collect one outcome per payload."""

    async def scenario():
        bus = EventBus()
        notifier = EmailNotifier(
            raw_config, bus, EVENT_NAME, mailer=SMTPClient(smtp_factory=smtp_factory)
        )
        outcomes = []
        async with notifier.start() as subscription:
            for payload in payloads:
                bus.emit(EVENT_NAME, payload)
            await bus.join()
            for _ in payloads:
                outcomes.append(await subscription.next_outcome())
        await bus.close()
        return outcomes

    return asyncio.run(scenario())


def sent_messages(mock_smtp):
    return [call.args[0] for call in mock_smtp.send_message.call_args_list]


def html_part(mime):
    for part in mime.iter_parts():
        if part.get_content_type() == "text/html":
            return part.get_content()
    raise AssertionError("no HTML part")


def test_failed_build_is_delivered(raw_config, smtp_factory, mock_smtp, event_payload):
    [outcome] = run_events(raw_config, smtp_factory, [event_payload])

    assert outcome.is_success()
    smtp_factory.assert_called_once_with("smtp.example.com", 25)

    [mime] = sent_messages(mock_smtp)
    assert mime["From"] == "screwdriver@example.com"
    assert mime["To"] == "dev-team@example.com, lead@example.com"
    assert mime["Subject"] == "FAILURE - Screwdriver screwdriver-cd/ui main #42"

    html = html_part(mime)
    assert "#FF4136" in html
    assert "#42" in html
    assert 'href="https://cd.screwdriver.cd/pipelines/7/builds/42"' in html
    mock_smtp.quit.assert_called_once()


def test_success_with_default_watch_set_sends_nothing(
    raw_config, smtp_factory, mock_smtp, event_payload
):
    event_payload["settings"]["email"] = "dev@example.com"
    event_payload["status"] = "SUCCESS"

    [outcome] = run_events(raw_config, smtp_factory, [event_payload])

    assert outcome.is_skipped()
    smtp_factory.assert_not_called()


def test_outcomes_follow_delivery_order(raw_config, smtp_factory, mock_smtp, event_payload):
    """Test that a bad event in the middle does not disturb its neighbours."""
    first = dict(event_payload, buildId=1)
    invalid = dict(event_payload, status="BROKEN")
    aborted = dict(
        event_payload,
        buildId=3,
        status="ABORTED",
        settings={"email": {"addresses": ["ops@example.com"], "statuses": ["ABORTED"]}},
    )

    outcomes = run_events(raw_config, smtp_factory, [first, invalid, aborted])

    assert [outcome.status for outcome in outcomes] == ["sent", "failed", "sent"]
    assert outcomes[1].reason == "invalid_event"
    assert [outcome.build_id for outcome in outcomes] == [1, None, 3]

    messages = sent_messages(mock_smtp)
    assert len(messages) == 2
    assert messages[1]["To"] == "ops@example.com"
    assert "#767676" in html_part(messages[1])


def test_smtp_failure_is_scoped_to_one_event(
    raw_config, smtp_factory, mock_smtp, event_payload
):
    mock_smtp.send_message.side_effect = [ConnectionResetError("reset"), {}]

    outcomes = run_events(
        raw_config,
        smtp_factory,
        [dict(event_payload, buildId=1), dict(event_payload, buildId=2)],
    )

    assert outcomes[0].is_failure()
    assert outcomes[0].reason == "mailer_error"
    assert "Network error" in str(outcomes[0].error)
    assert outcomes[1].is_success()
    assert mock_smtp.quit.call_count == 2


def test_implicit_tls_port(raw_config, mock_smtp, event_payload):
    raw_config["port"] = 465
    smtp_factory = Mock()
    ssl_factory = Mock(return_value=mock_smtp)

    async def scenario():
        bus = EventBus()
        notifier = EmailNotifier(
            raw_config,
            bus,
            EVENT_NAME,
            mailer=SMTPClient(smtp_factory=smtp_factory, smtp_ssl_factory=ssl_factory),
        )
        outcome = await notifier.handle_event(event_payload)
        await bus.close()
        return outcome

    outcome = asyncio.run(scenario())

    assert outcome.is_success()
    smtp_factory.assert_not_called()
    assert ssl_factory.call_args.args == ("smtp.example.com", 465)
