"""
Streaming display channels.

A display is a passive, possibly long-lived value stream. The producer
calls ``update()`` any number of times; a single consumer pulls values in
the order they were produced. Values are buffered without bound until the
consumer catches up. Cancelling ends the stream and drops whatever is
still buffered.

Example:
    >>> handle = manager.display(message="Downloading", kind="progress")
    >>> handle.update(10)
    >>> handle.update(55)
    >>>
    >>> async for percent in handle.stream:
    ...     render(percent)
    ...     if percent >= 100:
    ...         handle.cancel()
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from collections.abc import Callable, Iterator
from concurrent.futures import Future, InvalidStateError
from typing import Any

from promptslot.exceptions import StreamClosedError
from promptslot.types import DisplayPrompt

logger = logging.getLogger(__name__)


class DisplayChannel:
    """
    Single-consumer value channel behind a display.

    Holds the buffer, one waiting-consumer slot and the cancelled flag.
    Exactly one pull may be outstanding at a time.

    Attributes:
        prompt: Presentation view of the display.
    """

    def __init__(
        self,
        prompt: DisplayPrompt,
        on_close: Callable[[str], None] | None = None,
    ) -> None:
        """
        Initialize the channel.

        Args:
            prompt: The display this channel streams for.
            on_close: Called with the display ID when the consumer closes
                the stream through ``aclose()``.
        """
        self.prompt = prompt
        self._on_close = on_close
        self._buffer: deque[Any] = deque()
        self._waiter: Future | None = None
        self._cancelled = False
        self._lock = threading.Lock()

    @property
    def id(self) -> str:
        """The display ID."""
        return self.prompt.id

    @property
    def cancelled(self) -> bool:
        """Whether the channel has been closed."""
        return self._cancelled

    @property
    def buffered(self) -> int:
        """Number of values waiting to be pulled."""
        return len(self._buffer)

    def push(self, value: Any) -> bool:
        """
        Deliver a value to the waiting pull, or buffer it.

        Args:
            value: The value to deliver.

        Returns:
            False if the channel is cancelled and the value was dropped.
        """
        with self._lock:
            if self._cancelled:
                return False
            waiter, self._waiter = self._waiter, None
            if waiter is None or waiter.done():
                self._buffer.append(value)
                return True

        try:
            waiter.set_result(value)
        except InvalidStateError:
            # The consumer gave up on this pull; keep the value for the next one.
            with self._lock:
                if not self._cancelled:
                    self._buffer.appendleft(value)
        return True

    def close(self) -> bool:
        """
        Mark the channel cancelled and end the stream.

        Wakes a waiting pull with StreamClosedError and discards the buffer.

        Returns:
            True if the channel was open.
        """
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
            self._buffer.clear()
            waiter, self._waiter = self._waiter, None

        if waiter is not None and not waiter.done():
            try:
                waiter.set_exception(StreamClosedError(self.id))
            except InvalidStateError:
                logger.debug(f"Display {self.id} pull settled before close")
        return True

    def next_value(self) -> Future:
        """
        Pull the next value.

        Returns:
            A future that is already complete when a value is buffered,
            completes on the next ``push()``, or fails with
            StreamClosedError once the channel is cancelled.

        Raises:
            RuntimeError: If another pull is still outstanding.
        """
        future: Future = Future()
        with self._lock:
            if self._buffer:
                future.set_result(self._buffer.popleft())
                return future
            if self._cancelled:
                future.set_exception(StreamClosedError(self.id))
                return future
            if self._waiter is not None and not self._waiter.done():
                raise RuntimeError(f"Display {self.id} already has a pending pull")
            self._waiter = future
        return future

    def drain(self) -> list[Any]:
        """Take every buffered value without waiting."""
        with self._lock:
            values = list(self._buffer)
            self._buffer.clear()
        return values

    def __aiter__(self) -> DisplayChannel:
        return self

    async def __anext__(self) -> Any:
        try:
            return await asyncio.wrap_future(self.next_value())
        except StreamClosedError:
            raise StopAsyncIteration from None

    async def aclose(self) -> None:
        """Close the stream from the consumer side, cancelling the display."""
        if self._on_close is not None:
            self._on_close(self.id)
        else:
            self.close()


class DisplayHandle:
    """
    Producer handle returned by ``InputManager.display()``.

    Attributes:
        id: The display ID.
        stream: The channel to iterate for values.
        prompt: Presentation view of the display.
    """

    def __init__(
        self,
        channel: DisplayChannel,
        update: Callable[[Any], None],
        cancel: Callable[[], None],
    ) -> None:
        self.stream = channel
        self._update = update
        self._cancel = cancel

    @property
    def id(self) -> str:
        return self.stream.id

    @property
    def prompt(self) -> DisplayPrompt:
        return self.stream.prompt

    def update(self, value: Any) -> None:
        """Push a value; a no-op once the display is cancelled."""
        self._update(value)

    def cancel(self) -> None:
        """Cancel the display and end its stream."""
        self._cancel()

    def __repr__(self) -> str:
        return f"DisplayHandle(id={self.id!r}, cancelled={self.stream.cancelled})"


class DisplayRegistry:
    """
    Active display channels, in creation order.

    Owned by the InputManager, which serialises access under its lock.
    """

    def __init__(self) -> None:
        self._channels: dict[str, DisplayChannel] = {}

    def add(self, channel: DisplayChannel) -> None:
        """Register a channel."""
        self._channels[channel.id] = channel

    def remove(self, display_id: str) -> DisplayChannel | None:
        """Unregister a channel. Returns it, or None if unknown."""
        return self._channels.pop(display_id, None)

    def get(self, display_id: str) -> DisplayChannel | None:
        """Look up a channel by ID."""
        return self._channels.get(display_id)

    def next_waiting(self) -> DisplayChannel | None:
        """The earliest-registered channel that is not in the foreground."""
        for channel in self._channels.values():
            if channel.prompt.suspended and not channel.cancelled:
                return channel
        return None

    def prompts(self) -> list[DisplayPrompt]:
        """Presentation views of every active display."""
        return [channel.prompt for channel in self._channels.values()]

    def clear(self) -> list[DisplayChannel]:
        """Unregister and return every channel."""
        channels = list(self._channels.values())
        self._channels.clear()
        return channels

    def __iter__(self) -> Iterator[DisplayChannel]:
        return iter(list(self._channels.values()))

    def __len__(self) -> int:
        return len(self._channels)

    def __contains__(self, display_id: str) -> bool:
        return display_id in self._channels
