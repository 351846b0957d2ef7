"""Configuration schema models using Pydantic."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .validators import EmailAddress, Integer


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


@dataclass(frozen=True)
class SMTPTransport:
    """Transport parameters handed to the mailer alongside each message."""

    host: str
    port: int


class NotifierConfig(BaseModel):
    """Mail server settings for the email notifier.

    Built once when the notifier is constructed and never mutated afterwards.
    The sender address is read from the ``from`` key, matching the shape the
    host pipeline service passes in.
    """

    host: str = Field(..., min_length=1, description="Mail server hostname")
    port: Integer = Field(..., ge=1, le=65535, description="Mail server port")
    sender: EmailAddress = Field(
        ..., alias="from", description="Sender address for every outgoing message"
    )

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @field_validator("host")
    @classmethod
    def strip_host(cls, v: str) -> str:
        """Strip whitespace from the hostname."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("host cannot be empty or whitespace-only")
        return stripped

    @property
    def transport(self) -> SMTPTransport:
        """Transport parameters drawn from this configuration."""
        return SMTPTransport(host=self.host, port=self.port)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for a notifier deployment."""

    email: NotifierConfig = Field(..., description="Mail server settings")
    event_name: str = Field(
        "build_status",
        min_length=1,
        description="Name of the host event the notifier listens on",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
