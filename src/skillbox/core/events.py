"""In-process event channel for change notifications."""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Awaitable[None] | None]


class EventEmitter:
    """
    Observer list keyed by event name.

    Listeners may be plain functions or coroutine functions. A listener that
    raises is logged and skipped; the remaining listeners still run.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for an event.

        Returns:
            Callable that removes the listener again
        """
        self._listeners[event].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[event]:
                self._listeners[event].remove(listener)

        return unsubscribe

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    async def emit(self, event: str, payload: Any) -> None:
        """Deliver payload to every listener of event, in subscription order."""
        for listener in list(self._listeners.get(event, [])):
            try:
                result = listener(payload)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Error in '{event}' listener: {e}")
