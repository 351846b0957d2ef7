"""Status policy: normalize email settings and decide whether to notify."""

from typing import Any, Union

from pydantic import TypeAdapter, ValidationError

from build_notifier.config.validators import format_validation_errors, violated_fields
from build_notifier.events.exceptions import EventValidationError
from build_notifier.events.models import (
    AddressList,
    BuildStatus,
    EmailSetting,
    SingleAddress,
    StructuredEmailSetting,
)

_email_setting_adapter = TypeAdapter(EmailSetting)


def parse_email_setting(raw: Any) -> Union[StructuredEmailSetting, SingleAddress, AddressList]:
    """Validate a raw ``settings.email`` value into one of its three variants.

    Raises:
        EventValidationError: If the value matches none of the variants
    """
    try:
        return _email_setting_adapter.validate_python(raw)
    except ValidationError as e:
        raise EventValidationError(
            "Invalid email setting",
            errors=format_validation_errors(e),
            fields=violated_fields(e),
        ) from e


def normalize(
    setting: Union[StructuredEmailSetting, SingleAddress, AddressList],
) -> StructuredEmailSetting:
    """Return the canonical structured form of an email setting.

    A bare address or address list is wrapped with the default watch set
    ``[FAILURE]``. A structured setting is returned unchanged, including an
    explicitly empty ``statuses`` list.
    """
    return setting.to_structured()


def should_notify(setting: StructuredEmailSetting, status: BuildStatus) -> bool:
    """True iff ``status`` is in the setting's watch set."""
    return status in setting.statuses
