"""Exceptions raised while validating incoming build events."""

from typing import List, Optional


class EventValidationError(ValueError):
    """Raised when a delivered build event does not match the expected shape.

    Scoped to the single event that caused it; the listener keeps running.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        fields: Optional[List[str]] = None,
    ):
        self.message = message
        self.errors = errors or []
        self.fields = fields or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.errors:
            return self.message
        return f"{self.message}: " + "; ".join(self.errors)
