"""
Lifecycle events and listener fan-out.

The manager publishes two streams:

- state-change notifications (no payload), used by presentation layers
  to re-render;
- lifecycle events (InputEvent), intended for telemetry.

Both are delivered synchronously, in the order the transitions happen.
A failing listener is logged and never stops delivery to the others.

Example:
    >>> events = []
    >>> unsubscribe = manager.subscribe_events(events.append)
    >>> future = manager.submit(message="Name?")
    >>> events[0].type
    <EventType.PROMPT_SHOWN: 'prompt:shown'>
    >>> unsubscribe()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Lifecycle event types."""

    PROMPT_SHOWN = "prompt:shown"
    PROMPT_RESOLVED = "prompt:resolved"
    PROMPT_CANCELED = "prompt:canceled"
    DISPLAY_STARTED = "display:started"
    DISPLAY_UPDATED = "display:updated"
    DISPLAY_CANCELED = "display:canceled"
    DISPLAY_SUSPENDED = "display:suspended"
    DISPLAY_RESUMED = "display:resumed"


@dataclass(frozen=True)
class InputEvent:
    """
    A single lifecycle transition.

    Attributes:
        type: What happened.
        id: The prompt or display the event concerns.
        kind: Renderer category, for shown/started events.
        reason: Cancellation reason, for prompt:canceled.
        value: The new value, for display:updated.
        timestamp: When the event was emitted.
    """

    type: EventType
    id: str
    kind: str | None = None
    reason: str | None = None
    value: Any = None
    timestamp: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, dropping fields the type does not use."""
        data: dict[str, Any] = {"type": self.type.value, "id": self.id}
        if self.type in (EventType.PROMPT_SHOWN, EventType.DISPLAY_STARTED):
            data["kind"] = self.kind
        elif self.type == EventType.PROMPT_CANCELED:
            data["reason"] = self.reason
        elif self.type == EventType.DISPLAY_UPDATED:
            data["value"] = self.value
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def create(cls, event_type: EventType, event_id: str, **fields: Any) -> InputEvent:
        """Build an event stamped with the current UTC time."""
        return cls(type=event_type, id=event_id, timestamp=datetime.now(timezone.utc), **fields)


class ListenerSet:
    """
    Ordered set of listeners with unsubscribe handles.

    Listeners are called in subscription order. Subscribing the same
    callable twice registers it once. Listeners added or removed during
    delivery take effect from the next call.

    Example:
        >>> listeners = ListenerSet("state")
        >>> unsubscribe = listeners.subscribe(lambda: print("changed"))
        >>> listeners.call()
        changed
        >>> unsubscribe()
        >>> len(listeners)
        0
    """

    def __init__(self, name: str = "listener") -> None:
        self.name = name
        self._listeners: list[Callable[..., None]] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Callable[..., None]) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            listener: Callable invoked on every ``call()``.

        Returns:
            A function that removes the listener; calling it twice is safe.
        """
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: Callable[..., None]) -> bool:
        """Remove a listener. Returns True if it was registered."""
        with self._lock:
            try:
                self._listeners.remove(listener)
                return True
            except ValueError:
                return False

    def call(self, *args: Any) -> None:
        """Invoke every listener with ``args``."""
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(*args)
            except Exception as e:
                logger.error(f"{self.name} listener error: {e}", exc_info=True)

    def clear(self) -> None:
        """Remove all listeners."""
        with self._lock:
            self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)
