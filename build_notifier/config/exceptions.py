"""Configuration errors."""

from typing import List, Optional, Sequence

from pydantic import ValidationError

from .validators import format_validation_errors, violated_fields


class ConfigError(Exception):
    """Fatal configuration problem; the notifier refuses to start.

    ``str(error)`` renders the message followed by numbered validation
    errors and suggestions, ready to print to an operator.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[Sequence[str]] = None,
        suggestions: Optional[Sequence[str]] = None,
        fields: Optional[Sequence[str]] = None,
    ):
        self.message = message
        self.errors: List[str] = list(errors or [])
        self.suggestions: List[str] = list(suggestions or [])
        # Dotted paths, e.g. "email.port"
        self.fields: List[str] = list(fields or [])
        super().__init__(self.render())

    @classmethod
    def from_validation_error(
        cls,
        message: str,
        exc: ValidationError,
        suggestions: Optional[Sequence[str]] = None,
    ) -> "ConfigError":
        """Build a ConfigError listing every violation in a pydantic error."""
        return cls(
            message,
            errors=format_validation_errors(exc),
            suggestions=suggestions,
            fields=violated_fields(exc),
        )

    def render(self) -> str:
        lines = [self.message]
        if self.errors:
            lines.append("\nValidation Errors:")
            lines.extend(f"  {n}. {error}" for n, error in enumerate(self.errors, 1))
        if self.suggestions:
            lines.append("\nSuggestions:")
            lines.extend(f"  - {suggestion}" for suggestion in self.suggestions)
        return "\n".join(lines)
