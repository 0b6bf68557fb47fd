"""
Cancellation bridging for input prompts.

Binds an external cancellation source and a timeout to the manager's
cancel path. Whichever path settles a prompt first wins; the bridge then
removes its listener and cancels its timer exactly once so nothing fires
after settlement.

Example:
    >>> token = CancellationToken()
    >>> future = manager.submit(message="Name?", cancel_token=token, timeout=30.0)
    >>> token.cancel()
    >>> future.result()
    None
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from promptslot.types import CancelReason

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


@runtime_checkable
class CancellationSource(Protocol):
    """
    Protocol for external cancellation sources.

    Implement this to plug any abort mechanism into the manager.
    Listeners must fire at most once, when the source is cancelled.
    """

    @property
    def cancelled(self) -> bool:
        """Whether the source has already been cancelled."""
        ...

    def add_listener(self, listener: Listener) -> bool:
        """Register a listener. Returns False if already cancelled."""
        ...

    def remove_listener(self, listener: Listener) -> bool:
        """Unregister a listener. Returns True if it was registered."""
        ...


class CancellationToken:
    """
    A one-shot cancellation signal.

    Listeners run synchronously, in registration order, on the thread
    that calls ``cancel()``. Cancelling twice is a no-op.

    Example:
        >>> token = CancellationToken()
        >>> token.add_listener(lambda: print("cancelled"))
        True
        >>> token.cancel("user pressed escape")
        cancelled
        >>> token.cancelled
        True
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._cancelled = False
        self._reason: Any = None
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        """Whether cancel() has been called."""
        return self._cancelled

    @property
    def reason(self) -> Any:
        """The reason passed to cancel(), if any."""
        return self._reason

    def add_listener(self, listener: Listener) -> bool:
        """
        Register a listener.

        Returns:
            False if the token is already cancelled; the listener is then
            not registered and will never be called.
        """
        with self._lock:
            if self._cancelled:
                return False
            self._listeners.append(listener)
            return True

    def remove_listener(self, listener: Listener) -> bool:
        """Unregister a listener. Returns True if it was registered."""
        with self._lock:
            try:
                self._listeners.remove(listener)
                return True
            except ValueError:
                return False

    def cancel(self, reason: Any = None) -> None:
        """Cancel the token and notify listeners once."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            self._reason = reason
            listeners, self._listeners = self._listeners, []

        for listener in listeners:
            try:
                listener()
            except Exception as e:
                logger.error(f"Cancellation listener error: {e}")


@runtime_checkable
class TimerHandle(Protocol):
    """Handle to a scheduled one-shot callback."""

    def cancel(self) -> Any:
        ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def default_timer_factory(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """
    Schedule a one-shot callback.

    Uses the running asyncio loop when called from inside one, so the
    callback fires on the loop thread. Otherwise falls back to a daemon
    ``threading.Timer``.

    Args:
        delay: Seconds until the callback fires.
        callback: Function to call.

    Returns:
        A handle whose ``cancel()`` prevents the callback from firing.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is not None:
        return loop.call_later(delay, callback)

    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class _ManualTimer:
    def __init__(self, factory: ManualTimerFactory, deadline: float, callback: Callable[[], None]):
        self._factory = factory
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        if not self.cancelled and not self.fired:
            self.cancelled = True
            self._factory._cancelled_count += 1


class ManualTimerFactory:
    """
    Deterministic timer factory driven by an explicit clock.

    Timers only fire when ``advance()`` moves the clock past their
    deadline. Useful for testing timeout behaviour without sleeping.

    Example:
        >>> timers = ManualTimerFactory()
        >>> manager = InputManager(config, timer_factory=timers)
        >>> future = manager.submit(message="Quick!", timeout=5.0)
        >>> timers.advance(5.0)
        1
        >>> future.result()
        None
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._heap: list[tuple[float, int, _ManualTimer]] = []
        self._sequence = itertools.count()
        self._cancelled_count = 0

    @property
    def now(self) -> float:
        """Current clock value in seconds."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of timers that are scheduled and not cancelled."""
        return sum(1 for _, _, timer in self._heap if not timer.cancelled)

    @property
    def cancelled_count(self) -> int:
        """Number of timers cancelled before firing."""
        return self._cancelled_count

    def __call__(self, delay: float, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self, self._now + delay, callback)
        heapq.heappush(self._heap, (timer.deadline, next(self._sequence), timer))
        return timer

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and fire every timer that became due.

        Args:
            seconds: How far to move the clock.

        Returns:
            Number of timers fired.
        """
        target = self._now + seconds
        fired = 0
        while self._heap and self._heap[0][0] <= target:
            deadline, _, timer = heapq.heappop(self._heap)
            self._now = deadline
            if timer.cancelled:
                continue
            fired += 1
            timer.fired = True
            timer.callback()
        self._now = target
        return fired


class CancellationBridge:
    """
    Binds a cancellation source and a timeout to one prompt.

    The listener and timer both call ``on_cancel`` with a CancelReason.
    ``release()`` undoes both; the manager calls it on every settlement
    path, and repeated calls are no-ops.

    Attributes:
        prompt_id: The prompt this bridge guards.
    """

    def __init__(
        self,
        prompt_id: str,
        on_cancel: Callable[[CancelReason], None],
        timer_factory: TimerFactory = default_timer_factory,
    ) -> None:
        self.prompt_id = prompt_id
        self._on_cancel = on_cancel
        self._timer_factory = timer_factory
        self._source: CancellationSource | None = None
        self._timer: TimerHandle | None = None
        self._released = False
        self._lock = threading.Lock()

    @property
    def released(self) -> bool:
        """Whether release() has run."""
        return self._released

    def attach(self, source: CancellationSource | None, timeout: float | None) -> bool:
        """
        Register the abort listener and start the timeout timer.

        Args:
            source: Optional cancellation source.
            timeout: Seconds until timeout; None or <= 0 starts no timer.

        Returns:
            False if the source was already cancelled, so no abort will
            ever be delivered through the listener.
        """
        armed = True
        if source is not None:
            self._source = source
            armed = source.add_listener(self._handle_abort) is not False

        if timeout is not None and timeout > 0:
            self._timer = self._timer_factory(timeout, self._handle_timeout)
        return armed

    def release(self) -> None:
        """Remove the listener and cancel the timer, once."""
        with self._lock:
            if self._released:
                return
            self._released = True
            source, self._source = self._source, None
            timer, self._timer = self._timer, None

        if source is not None:
            source.remove_listener(self._handle_abort)
        if timer is not None:
            timer.cancel()

    def _handle_abort(self) -> None:
        if not self._released:
            self._on_cancel(CancelReason.ABORT)

    def _handle_timeout(self) -> None:
        if not self._released:
            logger.debug(f"Prompt {self.prompt_id} timed out")
            self._on_cancel(CancelReason.TIMEOUT)
