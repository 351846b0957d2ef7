"""Template rendering for email notifications using Jinja2.

Templates are bundled in the ``build_notifier.notifications`` package under
``email_templates/`` and addressed by their path relative to that directory.
"""

import logging
from typing import Any, Mapping

from jinja2 import Environment, PackageLoader, StrictUndefined
from jinja2 import TemplateError as JinjaTemplateError

from .models import TemplateError

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Renders bundled email templates with Jinja2.

    Autoescaping is on and undefined variables raise, so a template that
    references a substitution the caller did not supply fails loudly.
    Loaded templates are cached by the Jinja2 environment.
    """

    def __init__(self, template_dir: str = "email_templates"):
        """Initialize template renderer with a Jinja2 environment.

        Args:
            template_dir: Directory name within build_notifier.notifications
        """
        self.template_dir = template_dir
        self.env = Environment(
            loader=PackageLoader("build_notifier.notifications", template_dir),
            autoescape=True,
            undefined=StrictUndefined,
        )

        logger.debug(f"Initialized TemplateRenderer with templates from {template_dir}")

    def render(self, template_path: str, substitutions: Mapping[str, Any]) -> str:
        """Render a template with the given named values.

        Args:
            template_path: Template path relative to the template directory
            substitutions: Mapping of placeholder name to value

        Returns:
            Rendered document

        Raises:
            TemplateError: If the template is missing or rendering fails
        """
        try:
            template = self.env.get_template(template_path)
            return template.render(dict(substitutions))
        except JinjaTemplateError as e:
            error_msg = f"Template rendering failed for {template_path}: {e}"
            logger.error(error_msg)
            raise TemplateError(error_msg) from e
        except Exception as e:
            error_msg = f"Unexpected error rendering {template_path}: {e}"
            logger.error(error_msg, exc_info=True)
            raise TemplateError(error_msg) from e
