"""Message composition for build notifications.

Builds the subject line, plaintext body and rendered HTML body for a build
event and assembles them into an OutgoingMessage.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Protocol

from build_notifier.events.models import STATUS_COLORS, BuildEvent, StructuredEmailSetting

from .models import OutgoingMessage, TemplateError
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)

EMAIL_TEMPLATE = "email.html"


class Renderer(Protocol):
    """Anything that fills a template with named values."""

    def render(self, template_path: str, substitutions: Mapping[str, Any]) -> str:
        ...


def _display(value: Optional[Any]) -> str:
    # Optional display fields render as empty text when absent
    return "" if value is None else str(value)


def build_subject(event: BuildEvent) -> str:
    """Subject line: ``<STATUS> - Screwdriver <pipeline> <job> #<buildId>``."""
    return (
        f"{event.status.value} - Screwdriver {_display(event.pipeline_name)} "
        f"{_display(event.job_name)} #{_display(event.build_id)}"
    )


def build_text(event: BuildEvent) -> str:
    """Plaintext body: two lines, status then link."""
    return f"Build status: {event.status.value}\nBuild link:{_display(event.build_link)}"


def build_substitutions(event: BuildEvent) -> Dict[str, str]:
    """Named values handed to the HTML template."""
    return {
        "build_status": event.status.value,
        "build_link": _display(event.build_link),
        "build_id": _display(event.build_id),
        "status_color": STATUS_COLORS[event.status],
    }


class MessageComposer:
    """Turns a validated, filtered build event into an OutgoingMessage."""

    def __init__(
        self,
        renderer: Optional[Renderer] = None,
        template_name: str = EMAIL_TEMPLATE,
    ):
        self.renderer = renderer or TemplateRenderer()
        self.template_name = template_name

    def render_html(self, event: BuildEvent) -> str:
        """Render the HTML body.

        Raises:
            TemplateError: If the renderer fails for any reason
        """
        try:
            return self.renderer.render(self.template_name, build_substitutions(event))
        except TemplateError:
            raise
        except Exception as e:
            raise TemplateError(f"Template rendering failed: {e}") from e

    def compose(
        self,
        event: BuildEvent,
        setting: StructuredEmailSetting,
        sender: str,
    ) -> OutgoingMessage:
        """Build the complete message for one event.

        Args:
            event: Validated build event
            setting: Normalized email setting for the build
            sender: Configured sender address

        Returns:
            OutgoingMessage addressed to the setting's recipients
        """
        html = self.render_html(event)
        message = OutgoingMessage(
            sender=sender,
            to=list(setting.addresses),
            subject=build_subject(event),
            text=build_text(event),
            html=html,
        )
        logger.debug(f"Composed message: {message.subject}")
        return message
