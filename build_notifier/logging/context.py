"""Scoped fields injected into every log record.

While a build event is handled, fields such as ``event_name``, ``build_id``
and ``build_status`` are pushed here and picked up by ContextualFilter.
The fields live in a contextvar, so each asyncio task sees only its own.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, Dict, Iterator, Optional

_fields: ContextVar[Optional[Dict[str, Any]]] = ContextVar("log_context", default=None)


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the active fields."""
    return dict(_fields.get() or {})


def push_log_context(**fields: Any) -> Token:
    """Layer ``fields`` over the active ones; undo with pop_log_context().

    Example:
        >>> token = push_log_context(event_name="build_status", build_id=42)
        >>> pop_log_context(token)
    """
    return _fields.set({**get_log_context(), **fields})


def pop_log_context(token: Token) -> None:
    _fields.reset(token)


def clear_log_context() -> None:
    """Drop every field. Used by tests."""
    _fields.set(None)


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Push ``fields`` for the duration of a ``with`` block.

    Example:
        >>> with log_context(event_name="build_status", build_id=42):
        ...     logger.info("Handling build event")
    """
    token = push_log_context(**fields)
    try:
        yield
    finally:
        pop_log_context(token)
