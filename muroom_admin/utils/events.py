"""Upload lifecycle events published by the coordinator."""
import asyncio
import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, List

logger = logging.getLogger(__name__)

ITEM_START = "item_start"
ITEM_COMPLETE = "item_complete"
ITEM_FAIL = "item_fail"
BATCH_COMPLETE = "batch_complete"

UPLOAD_EVENTS = frozenset({ITEM_START, ITEM_COMPLETE, ITEM_FAIL, BATCH_COMPLETE})


class EventEmitter:
    """
    Publishes upload events to sync or async listeners.

    Listeners run one at a time in subscription order, so console output
    from concurrent uploads never interleaves. A listener that raises is
    logged and skipped.
    """

    def __init__(self):
        self._listeners: DefaultDict[str, List[Callable]] = defaultdict(list)
        self._lock = asyncio.Lock()

    @staticmethod
    def _check(event_name: str) -> None:
        if event_name not in UPLOAD_EVENTS:
            raise ValueError(f"unknown upload event: {event_name}")

    def on(self, event_name: str, callback: Callable) -> Callable[[], None]:
        """Subscribe to an event; returns a function that unsubscribes."""
        self._check(event_name)
        if callback not in self._listeners[event_name]:
            self._listeners[event_name].append(callback)
        return lambda: self.off(event_name, callback)

    def off(self, event_name: str, callback: Callable) -> None:
        if callback in self._listeners.get(event_name, []):
            self._listeners[event_name].remove(callback)

    def listener_count(self, event_name: str) -> int:
        return len(self._listeners.get(event_name, []))

    async def emit(self, event_name: str, payload: Any) -> None:
        self._check(event_name)
        callbacks = list(self._listeners.get(event_name, []))
        if not callbacks:
            return

        async with self._lock:
            for callback in callbacks:
                try:
                    result = callback(payload)
                    if asyncio.iscoroutine(result):
                        await result
                except Exception as exc:
                    logger.error(f"Listener {getattr(callback, '__name__', callback)!r} failed on {event_name}: {exc}")
