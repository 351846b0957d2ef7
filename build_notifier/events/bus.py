"""In-process event bus for named build events.

The pipeline service emits named events carrying arbitrary payloads. Each
registered listener owns a FIFO queue drained by its own worker task, so a
listener sees its events in delivery order and finishes one before starting
the next. Different listeners run independently of each other.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Set, Union

from build_notifier.logging import get_logger

logger = get_logger(__name__, component="event_bus")

Handler = Callable[[Any], Union[None, Awaitable[None]]]

_STOP = object()


class EventSource(Protocol):
    """Anything a notifier can subscribe to."""

    def on(self, event_name: str, handler: Handler) -> None:
        ...


class _Listener:
    """A handler plus the queue and worker task that feed it."""

    def __init__(self, event_name: str, handler: Handler, log: logging.LoggerAdapter):
        self.event_name = event_name
        self.handler = handler
        self.logger = log
        self.queue: asyncio.Queue = asyncio.Queue()
        self.task: Optional[asyncio.Task] = None

    def deliver(self, payload: Any) -> None:
        self._ensure_worker()
        self.queue.put_nowait(payload)

    def stop(self) -> None:
        """Let the worker finish queued deliveries, then exit."""
        if self.task is not None and not self.task.done():
            self.queue.put_nowait(_STOP)

    def _ensure_worker(self) -> None:
        if self.task is None or self.task.done():
            loop = asyncio.get_running_loop()
            self.task = loop.create_task(self._run())

    async def _run(self) -> None:
        while True:
            payload = await self.queue.get()
            try:
                if payload is _STOP:
                    return
                result = self.handler(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.error(
                    f"Listener for '{self.event_name}' raised: {e}",
                    exc_info=True,
                    extra={"event": "event_bus.listener.error", "event_name": self.event_name},
                )
            finally:
                self.queue.task_done()


class EventBus:
    """Named-event bus with per-listener ordered delivery.

    ``emit`` never blocks: it enqueues the payload for every listener
    registered under the name and returns. It must be called from inside
    a running event loop.
    """

    def __init__(self, logger_instance: Optional[logging.LoggerAdapter] = None):
        self.logger = logger_instance or logger
        self._listeners: Dict[str, List[_Listener]] = {}
        self._retired: Set[_Listener] = set()

    def on(self, event_name: str, handler: Handler) -> None:
        """Register a handler for every future emission of ``event_name``."""
        self._listeners.setdefault(event_name, []).append(
            _Listener(event_name, handler, self.logger)
        )
        self.logger.debug(
            f"Registered listener for '{event_name}'",
            extra={"event": "event_bus.listener.added", "event_name": event_name},
        )

    def off(self, event_name: str, handler: Handler) -> bool:
        """Unregister a handler. Deliveries already queued are still handled.

        Returns:
            True if a listener was removed
        """
        listeners = self._listeners.get(event_name, [])
        for listener in listeners:
            if listener.handler == handler:
                listeners.remove(listener)
                listener.stop()
                if listener.task is not None:
                    self._retired.add(listener)
                return True
        return False

    def emit(self, event_name: str, payload: Any) -> int:
        """Deliver a payload to every listener of ``event_name``.

        Returns:
            Number of listeners the payload was queued for
        """
        listeners = list(self._listeners.get(event_name, []))
        for listener in listeners:
            listener.deliver(payload)
        return len(listeners)

    async def join(self) -> None:
        """Wait until every queued delivery has been handled."""
        listeners = [
            listener
            for group in self._listeners.values()
            for listener in group
        ] + list(self._retired)
        await asyncio.gather(*(listener.queue.join() for listener in listeners))
        self._retired = {
            listener
            for listener in self._retired
            if listener.task is not None and not listener.task.done()
        }

    async def close(self) -> None:
        """Drain all listeners and stop their workers."""
        listeners = [
            listener
            for group in self._listeners.values()
            for listener in group
        ] + list(self._retired)
        self._listeners.clear()
        self._retired.clear()
        for listener in listeners:
            listener.stop()
        tasks = [listener.task for listener in listeners if listener.task is not None]
        if tasks:
            await asyncio.gather(*tasks)
