#!/usr/bin/env python3
"""Sample event harness for manual end-to-end checks.

Starts an EmailNotifier on an in-process EventBus, emits one build event
and prints the outcome. Useful for checking mail server settings and the
rendered email without a running pipeline service.

Usage:
    # Emit the built-in sample event (FAILURE) through the configured server
    python scripts/send_sample_event.py --config config.yaml

    # Emit an event read from a YAML or JSON file
    python scripts/send_sample_event.py --config config.yaml --event event.yaml

    # Compose only; log the message instead of sending it
    python scripts/send_sample_event.py --config config.yaml --dry-run
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import yaml
from dotenv import load_dotenv

from build_notifier.config import ConfigError, SMTPTransport, load_config
from build_notifier.events import EventBus
from build_notifier.logging.config import configure_logging
from build_notifier.notifications import EmailNotifier, OutgoingMessage

SAMPLE_EVENT = {
    "settings": {
        "email": {
            "addresses": ["dev-team@example.com"],
            "statuses": ["FAILURE", "SUCCESS"],
        }
    },
    "status": "FAILURE",
    "pipelineName": "screwdriver-cd/sample",
    "jobName": "main",
    "buildId": 1234,
    "buildLink": "https://cd.screwdriver.cd/pipelines/1/builds/1234",
}

logger = logging.getLogger("send_sample_event")


class DryRunMailer:
    """Mailer that logs the message instead of sending it."""

    def send(self, message: OutgoingMessage, transport: SMTPTransport) -> dict:
        logger.info(
            f"Dry run: would send '{message.subject}' via {transport.host}:{transport.port}",
            extra={"event": "notification.dry_run", "recipients": message.to},
        )
        return {}


def load_event(path: Path) -> dict:
    """Load an event payload from a YAML (or JSON) file."""
    with open(path, "r") as f:
        return yaml.safe_load(f)


async def run(args: argparse.Namespace) -> int:
    app_config = load_config(args.config)
    configure_logging(
        level=app_config.logging.level,
        format_type=app_config.logging.format,
        environment=os.environ.get("ENVIRONMENT", "local"),
    )

    payload = load_event(args.event) if args.event else SAMPLE_EVENT

    bus = EventBus()
    notifier = EmailNotifier(
        app_config.email,
        bus,
        app_config.event_name,
        mailer=DryRunMailer() if args.dry_run else None,
    )

    async with notifier.start() as subscription:
        bus.emit(app_config.event_name, payload)
        outcome = await subscription.next_outcome()

    await bus.close()

    print(f"Outcome: {outcome.status}")
    if outcome.reason:
        print(f"Reason:  {outcome.reason}")
    if outcome.message is not None:
        print(f"Subject: {outcome.message.subject}")
        print(f"To:      {', '.join(outcome.message.to)}")
    if outcome.error is not None:
        print(f"Error:   {outcome.error}")

    return 1 if outcome.is_failure() else 0


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Emit one build event through the email notifier"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml)",
    )
    parser.add_argument(
        "--event",
        type=Path,
        default=None,
        help="YAML or JSON file holding the build event payload",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compose the message but log it instead of sending",
    )
    args = parser.parse_args()

    try:
        return asyncio.run(run(args))
    except ConfigError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
