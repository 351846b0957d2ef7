"""Build event models delivered by the host pipeline service.

This module defines the data structures for incoming build events:
- BuildStatus: enumeration of build outcomes and their display colours
- SingleAddress / AddressList / StructuredEmailSetting: the three accepted
  shapes of a build's ``settings.email`` value
- BuildSettings: per-build settings carrying the email setting
- BuildEvent: one build status change
"""

from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, List, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    RootModel,
    StringConstraints,
    Tag,
)

from build_notifier.config.validators import EmailAddress, Integer


class BuildStatus(str, Enum):
    """Build outcomes reported by the pipeline service."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ABORTED = "ABORTED"
    RUNNING = "RUNNING"
    QUEUED = "QUEUED"


STATUS_COLORS: Mapping[BuildStatus, str] = MappingProxyType(
    {
        BuildStatus.SUCCESS: "3D9970",
        BuildStatus.FAILURE: "FF4136",
        BuildStatus.ABORTED: "767676",
        BuildStatus.RUNNING: "7FDBFF",
        BuildStatus.QUEUED: "FFDC00",
    }
)

DEFAULT_STATUSES = (BuildStatus.FAILURE,)

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]


class StructuredEmailSetting(BaseModel):
    """Canonical email setting: who to notify and for which statuses.

    An empty ``statuses`` list is legal and means "never notify".
    """

    addresses: List[EmailAddress] = Field(
        default_factory=list, description="Recipient addresses"
    )
    statuses: List[BuildStatus] = Field(
        default_factory=lambda: list(DEFAULT_STATUSES),
        description="Statuses that trigger a notification",
    )

    model_config = ConfigDict(extra="forbid")

    def to_structured(self) -> "StructuredEmailSetting":
        return self


class SingleAddress(RootModel[EmailAddress]):
    """A bare recipient address."""

    def to_structured(self) -> StructuredEmailSetting:
        return StructuredEmailSetting(
            addresses=[self.root], statuses=list(DEFAULT_STATUSES)
        )


class AddressList(RootModel[List[EmailAddress]]):
    """A bare list of recipient addresses."""

    def to_structured(self) -> StructuredEmailSetting:
        return StructuredEmailSetting(
            addresses=list(self.root), statuses=list(DEFAULT_STATUSES)
        )


def _email_setting_tag(value: Any) -> Optional[str]:
    """Pick the union variant from the shape of the raw value."""
    if isinstance(value, (str, SingleAddress)):
        return "single"
    if isinstance(value, (list, tuple, AddressList)):
        return "list"
    if isinstance(value, (Mapping, StructuredEmailSetting)):
        return "structured"
    return None


EmailSetting = Annotated[
    Union[
        Annotated[StructuredEmailSetting, Tag("structured")],
        Annotated[SingleAddress, Tag("single")],
        Annotated[AddressList, Tag("list")],
    ],
    Discriminator(
        _email_setting_tag,
        custom_error_type="invalid_email_setting",
        custom_error_message=(
            "Email setting must be an address, a list of addresses, "
            "or an object with addresses and statuses"
        ),
    ),
]


class BuildSettings(BaseModel):
    """Per-build settings. Only ``email`` is interpreted; other keys are kept."""

    email: EmailSetting

    model_config = ConfigDict(extra="allow")


class BuildEvent(BaseModel):
    """One build status change emitted by the pipeline service.

    Payload keys are camelCase (``pipelineName``); attributes are snake_case.
    """

    settings: BuildSettings
    status: BuildStatus
    pipeline_name: Optional[NonEmptyStr] = Field(None, alias="pipelineName")
    job_name: Optional[NonEmptyStr] = Field(None, alias="jobName")
    build_id: Optional[Integer] = Field(None, alias="buildId")
    build_link: Optional[NonEmptyStr] = Field(None, alias="buildLink")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)
