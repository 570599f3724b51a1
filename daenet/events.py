# daenet/events.py
"""
Observer registration for relay bank notifications.

Subscribers are plain callables registered per event kind. Dispatch is
synchronous on the caller's thread (the event loop thread for the
controller), in registration order.
"""

import copy
from collections.abc import Callable
from enum import Enum
from typing import Any

from daenet.logging_system import DeviceLogger, get_logger


class RelayEvent(Enum):
    """Notifications published by a relay bank controller."""

    STATE_READ = "stateRead"  # payload: list[int] of 8 pins
    STATE_SET = "stateSet"  # payload: list[int] of 8 pins
    PIN_SET = "pinSet"  # payload: {"pin": int, "value": int}
    ERROR = "error"  # payload: RelayBankError


Subscriber = Callable[[Any], None]


def _own_copy(payload: Any) -> Any:
    """Each subscriber gets its own list/dict payload."""
    if isinstance(payload, (list, dict)):
        return copy.copy(payload)
    return payload


class EventBus:
    """Per-event subscriber lists."""

    def __init__(self, logger: DeviceLogger | None = None):
        self._subscribers: dict[RelayEvent, list[Subscriber]] = {
            event: [] for event in RelayEvent
        }
        self.logger = logger or get_logger(__name__)

    @staticmethod
    def _resolve(event: RelayEvent | str) -> RelayEvent:
        if isinstance(event, RelayEvent):
            return event
        try:
            return RelayEvent(event)
        except ValueError:
            raise ValueError(f"Unknown relay event: {event!r}") from None

    def on(self, event: RelayEvent | str, callback: Subscriber) -> Subscriber:
        """
        Register callback for event.

        Args:
            event: RelayEvent or its wire name ("stateRead", "pinSet", ...)
            callback: Called with the event payload

        Returns:
            The callback, so this can be used as a decorator target
        """
        self._subscribers[self._resolve(event)].append(callback)
        return callback

    def off(self, event: RelayEvent | str, callback: Subscriber) -> bool:
        """Remove callback. Returns False if it was not registered."""
        subscribers = self._subscribers[self._resolve(event)]
        if callback in subscribers:
            subscribers.remove(callback)
            return True
        return False

    def subscriber_count(self, event: RelayEvent | str) -> int:
        return len(self._subscribers[self._resolve(event)])

    def emit(self, event: RelayEvent | str, payload: Any) -> int:
        """
        Publish payload to every subscriber of event.

        An ERROR with no subscribers is dropped with a warning.

        Returns:
            Number of subscribers notified
        """
        event = self._resolve(event)
        subscribers = list(self._subscribers[event])

        if not subscribers:
            if event is RelayEvent.ERROR:
                self.logger.warning(
                    f"No '{event.value}' subscribers, dropping notification: {payload}"
                )
            return 0

        for callback in subscribers:
            try:
                callback(_own_copy(payload))
            except Exception as e:
                self.logger.error(f"'{event.value}' subscriber error: {e}")

        return len(subscribers)

    def clear(self) -> None:
        for subscribers in self._subscribers.values():
            subscribers.clear()
