"""Validation of raw build event payloads."""

from typing import Any, Mapping

from pydantic import ValidationError

from build_notifier.config.validators import format_validation_errors, violated_fields

from .exceptions import EventValidationError
from .models import BuildEvent


def validate_event(raw: Any) -> BuildEvent:
    """
    Validate a raw build event payload.

    ``settings`` (with an ``email`` setting) and ``status`` are required;
    ``pipelineName``, ``jobName``, ``buildId`` and ``buildLink`` are checked
    only when present. Status names are matched case-sensitively.

    Args:
        raw: Payload delivered by the event source

    Returns:
        Validated BuildEvent

    Raises:
        EventValidationError: If the payload is malformed
    """
    if isinstance(raw, BuildEvent):
        return raw

    if not isinstance(raw, Mapping):
        raise EventValidationError(
            "Invalid build data format",
            errors=[f"Expected an object, got {type(raw).__name__}"],
            fields=["<root>"],
        )

    try:
        return BuildEvent.model_validate(dict(raw))
    except ValidationError as e:
        raise EventValidationError(
            "Invalid build data format",
            errors=format_validation_errors(e),
            fields=violated_fields(e),
        ) from e
