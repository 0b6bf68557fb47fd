"""
The input manager: one foreground slot, many callers.

InputManager owns the active prompt, the queue of waiting prompts and the
registry of displays. Callers submit prompts and get a future back; the
presentation layer renders whatever is in the foreground and calls
``resolve()`` or ``cancel()``. Every prompt future settles exactly once,
with the answer or with None.

Example:
    >>> from promptslot import InputManager, InputConfig
    >>>
    >>> manager = InputManager(InputConfig(
    ...     renderers={"text": TextRenderer, "confirm": ConfirmRenderer},
    ...     default_renderer="text",
    ... ))
    >>>
    >>> future = manager.submit(message="Your name?")
    >>> prompt = manager.get_active()
    >>> manager.resolve(prompt.id, "Ada")
    >>> future.result()
    'Ada'
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import threading
from collections import defaultdict, deque
from collections.abc import Callable, Iterator
from concurrent.futures import Future, InvalidStateError
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from promptslot.cancellation import (
    CancellationBridge,
    TimerFactory,
    default_timer_factory,
)
from promptslot.display import DisplayChannel, DisplayHandle, DisplayRegistry
from promptslot.events import EventType, InputEvent, ListenerSet
from promptslot.exceptions import (
    ConfigurationError,
    MissingRendererError,
    NotInitializedError,
    PromptSlotError,
)
from promptslot.observability.hooks import (
    METRIC_DISPLAY_CANCELED,
    METRIC_DISPLAY_PREEMPTED,
    METRIC_DISPLAY_STARTED,
    METRIC_DISPLAY_UPDATES,
    METRIC_PROMPT_CANCELED,
    METRIC_PROMPT_RESOLVED,
    METRIC_PROMPT_SUBMITTED,
    METRIC_PROMPT_WAIT,
    METRIC_QUEUE_LENGTH,
    ObservabilityHooks,
)
from promptslot.renderers import RendererRegistry
from promptslot.scheduling.priority_queue import PromptQueue
from promptslot.types import (
    DEFAULT_DISPLAY_PRIORITY,
    DEFAULT_INPUT_PRIORITY,
    CancelReason,
    DisplayOptions,
    DisplayPrompt,
    InputOptions,
    InputPrompt,
    MissingRendererPolicy,
    generate_id,
)

logger = logging.getLogger(__name__)


@dataclass
class InputConfig:
    """
    Configuration for an InputManager.

    Attributes:
        renderers: Mapping from prompt kind to presentation handler.
        default_renderer: Kind used for prompts without one. Required.
        on_missing_renderer: Diagnostic policy for unrenderable prompts.
        prioritize_awaiting_inputs: Enable display preemption at start-up.
        default_input_priority: Priority of prompts that give none.
        default_display_priority: Priority of displays that give none.
        default_timeout: Timeout in seconds for prompts that give none.
        error_handler: Receives MissingRendererError under the throw policy.

    Example:
        >>> config = InputConfig(
        ...     renderers={"text": TextRenderer},
        ...     default_renderer="text",
        ...     on_missing_renderer="throw",
        ...     prioritize_awaiting_inputs=True,
        ... )
    """

    renderers: dict[str, Any] = field(default_factory=dict)
    default_renderer: str | None = None
    on_missing_renderer: MissingRendererPolicy = MissingRendererPolicy.RESOLVE_NULL
    prioritize_awaiting_inputs: bool = False
    default_input_priority: int = DEFAULT_INPUT_PRIORITY
    default_display_priority: int = DEFAULT_DISPLAY_PRIORITY
    default_timeout: float | None = None
    error_handler: Callable[[PromptSlotError], None] | None = None

    def __post_init__(self) -> None:
        try:
            self.on_missing_renderer = MissingRendererPolicy(self.on_missing_renderer)
        except ValueError:
            raise ConfigurationError(
                "on_missing_renderer",
                expected=", ".join(p.value for p in MissingRendererPolicy),
                received=self.on_missing_renderer,
            ) from None

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary (renderers listed by kind)."""
        return {
            "renderers": list(self.renderers),
            "default_renderer": self.default_renderer,
            "on_missing_renderer": self.on_missing_renderer.value,
            "prioritize_awaiting_inputs": self.prioritize_awaiting_inputs,
            "default_input_priority": self.default_input_priority,
            "default_display_priority": self.default_display_priority,
            "default_timeout": self.default_timeout,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InputConfig:
        """Create config from dictionary."""
        return cls(
            renderers=dict(data.get("renderers", {})),
            default_renderer=data.get("default_renderer"),
            on_missing_renderer=data.get("on_missing_renderer", MissingRendererPolicy.RESOLVE_NULL),
            prioritize_awaiting_inputs=data.get("prioritize_awaiting_inputs", False),
            default_input_priority=data.get("default_input_priority", DEFAULT_INPUT_PRIORITY),
            default_display_priority=data.get("default_display_priority", DEFAULT_DISPLAY_PRIORITY),
            default_timeout=data.get("default_timeout"),
            error_handler=data.get("error_handler"),
        )


@dataclass
class ManagerStats:
    """Lifetime counters for a manager."""

    prompts_submitted: int = 0
    prompts_resolved: int = 0
    prompts_canceled: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    displays_started: int = 0
    display_updates: int = 0
    displays_canceled: int = 0
    preemptions: int = 0


class InputManager:
    """
    Arbitrates a single foreground slot between prompts and displays.

    All state transitions run under one re-entrant lock, so triggers from
    timer threads or cancellation tokens are serialised with caller calls,
    and listeners may call back into the manager.

    Slot rules:
        - At most one prompt is active. Others wait in the queue, highest
          priority first, FIFO within a priority.
        - A display takes the slot only when no prompt holds or waits for
          it. With preemption enabled, a prompt whose priority is strictly
          greater than the visible display's suspends the display and
          takes the slot at once; the display resumes when no prompts are
          left.
    """

    def __init__(
        self,
        config: InputConfig | None = None,
        *,
        timer_factory: TimerFactory | None = None,
        hooks: ObservabilityHooks | None = None,
    ) -> None:
        """
        Initialize the manager.

        Args:
            config: Configuration; equivalent to calling ``init(config)``.
            timer_factory: Scheduler for prompt timeouts.
            hooks: Metric hooks registry.
        """
        self._timer_factory = timer_factory or default_timer_factory
        self._hooks = hooks or ObservabilityHooks()
        self._lock = threading.RLock()

        self._config: InputConfig | None = None
        self._renderers = RendererRegistry()
        self._prioritize = False
        self._closed = False

        self._queue = PromptQueue()
        self._current: InputPrompt | None = None
        self._visible: DisplayChannel | None = None
        self._displays = DisplayRegistry()
        self._bridges: dict[str, CancellationBridge] = {}
        self._undelivered: deque[tuple[InputPrompt, Any]] = deque()
        self._depth = 0

        self._listeners = ListenerSet("state")
        self._event_listeners = ListenerSet("event")
        self._stats = ManagerStats()

        if config is not None:
            self.init(config)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def init(self, config: InputConfig) -> None:
        """
        Install a configuration.

        Args:
            config: The configuration to use.

        Raises:
            ConfigurationError: If no default renderer is given.
        """
        if not config.default_renderer:
            raise ConfigurationError(
                "default_renderer",
                expected="a renderer kind",
                message="InputManager.init: default_renderer is required",
            )
        if config.default_renderer not in config.renderers:
            logger.warning("InputManager.init: default_renderer not found in renderers map")

        with self._lock:
            self._config = config
            self._renderers = RendererRegistry(config.renderers, default=config.default_renderer)
            self._prioritize = config.prioritize_awaiting_inputs
            self._closed = False
        logger.debug(f"InputManager initialized with renderers {self._renderers.kinds()}")

    @property
    def config(self) -> InputConfig | None:
        return self._config

    @property
    def renderers(self) -> RendererRegistry:
        """The renderer registry built from the config."""
        return self._renderers

    def is_initialized(self) -> bool:
        """Check if the manager has a config and is not closed."""
        return self._config is not None and not self._closed

    @property
    def prioritize_awaiting_inputs(self) -> bool:
        """Whether prompts may preempt a visible display."""
        return self._prioritize

    def set_prioritize_awaiting_inputs(self, enabled: bool) -> None:
        """
        Enable or disable display preemption.

        Enabling it while a display holds the slot lets the queue head
        preempt the display immediately if it outranks it.
        """
        with self._transition():
            if self._prioritize == enabled:
                return
            self._prioritize = enabled
            logger.debug(f"Preemption {'enabled' if enabled else 'disabled'}")
            if enabled:
                head = self._queue.peek()
                if head is not None and self._should_preempt(head):
                    self._queue.dequeue()
                    self._emit_queue_gauge()
                    self._preempt(head)
            self._notify()

    def _require_config(self, operation: str) -> InputConfig:
        if self._config is None or self._closed:
            raise NotInitializedError(operation)
        return self._config

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def submit(self, options: InputOptions | None = None, **overrides: Any) -> Future:
        """
        Submit a prompt for the foreground slot.

        Args:
            options: Prompt options; keyword arguments build or override them.

        Returns:
            Future settling with the answer, or None if the prompt is
            cancelled (abort, timeout, missing renderer, shutdown, or
            the caller cancelling the future).

        Raises:
            NotInitializedError: If the manager has no config.
        """
        config = self._require_config("submit")
        options = _build_options(InputOptions, options, overrides)

        priority = options.priority if options.priority is not None else config.default_input_priority
        timeout = options.timeout if options.timeout is not None else config.default_timeout
        prompt = InputPrompt.from_options(options, priority=priority, timeout=timeout)
        token = options.cancel_token

        with self._transition():
            self._stats.prompts_submitted += 1
            self._hooks.emit_counter(METRIC_PROMPT_SUBMITTED, tags={"kind": prompt.kind})

            if token is not None and token.cancelled:
                logger.debug(f"Prompt {prompt.id} submitted with a cancelled token")
                self._settle(prompt, None, CancelReason.ABORT.value)
                self._emit(EventType.PROMPT_CANCELED, prompt.id, reason=CancelReason.ABORT.value)
                self._notify()
                return prompt.future

            # Bridge before enqueue so the prompt can be cancelled while queued
            bridge = CancellationBridge(
                prompt.id,
                lambda reason: self.cancel(prompt.id, reason),
                self._timer_factory,
            )
            self._bridges[prompt.id] = bridge
            armed = bridge.attach(token, timeout)
            prompt.future.add_done_callback(self._make_future_callback(prompt.id))

            if self._should_preempt(prompt):
                self._preempt(prompt)
            else:
                self._queue.enqueue(prompt)
                self._process_queue()
            self._emit_queue_gauge()
            self._notify()

            # The token may have been cancelled from another thread after
            # the first check, before its listener was registered
            if token is not None and (not armed or token.cancelled) and not prompt.settled:
                logger.debug(f"Prompt {prompt.id} token cancelled during submit")
                self.cancel(prompt.id, CancelReason.ABORT)

        return prompt.future

    async def submit_async(self, options: InputOptions | None = None, **overrides: Any) -> Any:
        """
        Submit a prompt and await its answer.

        Cancelling the awaiting task cancels the prompt.

        Returns:
            The answer, or None if the prompt was cancelled.
        """
        future = self.submit(options, **overrides)
        return await asyncio.wrap_future(future)

    def resolve(self, prompt_id: str, value: Any) -> bool:
        """
        Answer the active prompt.

        Only the active prompt can be resolved. A stale ID (for example
        from a renderer that has since been replaced) is logged and
        ignored.

        Args:
            prompt_id: ID of the active prompt.
            value: The answer.

        Returns:
            True if the prompt was resolved.
        """
        with self._transition():
            current = self._current
            if current is None:
                logger.debug(f"resolve ignored for {prompt_id}: no active prompt")
                return False
            if current.id != prompt_id:
                logger.warning(
                    f"resolve called with non-current id {prompt_id} "
                    f"(active prompt is {current.id})"
                )
                return False

            self._current = None
            self._settle(current, value, None)
            self._emit(EventType.PROMPT_RESOLVED, prompt_id)
            self._notify()
            self._process_queue()
            return True

    def cancel(self, prompt_id: str, reason: CancelReason | str = CancelReason.MANUAL) -> bool:
        """
        Cancel a prompt that is active or still queued.

        The prompt's future settles with None. Cancelling the active
        prompt advances the queue. Unknown or settled IDs are ignored.

        Args:
            prompt_id: ID of the prompt.
            reason: Why the prompt is cancelled. Strings outside
                CancelReason are passed through to events and metrics.

        Returns:
            True if a prompt was cancelled.
        """
        reason = _reason_value(reason)
        with self._transition():
            if self._current is not None and self._current.id == prompt_id:
                prompt = self._current
                self._current = None
                self._settle(prompt, None, reason)
                self._emit(EventType.PROMPT_CANCELED, prompt_id, reason=reason)
                self._notify()
                self._process_queue()
                return True

            prompt = self._queue.remove(prompt_id)
            if prompt is not None:
                # The active slot is untouched, so no drain is needed
                self._settle(prompt, None, reason)
                self._emit(EventType.PROMPT_CANCELED, prompt_id, reason=reason)
                self._emit_queue_gauge()
                self._notify()
                return True

        logger.debug(f"cancel ignored for {prompt_id}: not active or queued")
        return False

    def handle_missing_renderer(self) -> bool:
        """
        Cancel the active prompt because nothing can render it.

        Called by the presentation layer when the active prompt's kind
        has no renderer. Every policy cancels the prompt so the queue
        keeps moving; the policy only selects the diagnostic.

        Returns:
            True if a prompt was cancelled.
        """
        with self._transition():
            config = self._config
            prompt = self._current
            if config is None or prompt is None:
                return False

            policy = config.on_missing_renderer
            if policy == MissingRendererPolicy.THROW:
                error = MissingRendererError(prompt.id, prompt.kind)
                logger.error(str(error))
                if config.error_handler is not None:
                    try:
                        config.error_handler(error)
                    except Exception as e:
                        logger.error(f"Missing renderer error handler failed: {e}")
            elif policy == MissingRendererPolicy.REJECT:
                logger.warning(f"No renderer for kind: {prompt.kind}; rejecting prompt {prompt.id}")
            else:
                logger.debug(f"No renderer for kind: {prompt.kind}; resolving prompt {prompt.id} with None")

            return self.cancel(prompt.id, CancelReason.MISSING_RENDERER)

    def _make_future_callback(self, prompt_id: str) -> Callable[[Future], None]:
        def on_done(future: Future) -> None:
            if future.cancelled():
                self.cancel(prompt_id, CancelReason.MANUAL)

        return on_done

    @contextmanager
    def _transition(self) -> Iterator[None]:
        """
        Hold the lock for a state change.

        Futures settled during the change are delivered only when the
        outermost change finishes, so caller callbacks observe the
        terminal event and the drained queue.
        """
        with self._lock:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
                outermost = self._depth == 0
        if outermost:
            self._deliver_settled()

    def _deliver_settled(self) -> None:
        while True:
            with self._lock:
                if not self._undelivered:
                    return
                prompt, result = self._undelivered.popleft()
            if prompt.future.done():
                continue
            try:
                prompt.future.set_result(result)
            except InvalidStateError:
                # Lost a race with the caller cancelling the future
                logger.debug(f"Prompt {prompt.id} future was cancelled by its caller")

    def _settle(self, prompt: InputPrompt, value: Any, reason: str | None) -> None:
        """
        Settle a prompt that has already left the slot and the queue.

        The future's result is queued for delivery after the transition.
        """
        if prompt.settled:
            raise RuntimeError(f"Prompt {prompt.id} settled twice")
        prompt.settled = True

        bridge = self._bridges.pop(prompt.id, None)
        if bridge is not None:
            bridge.release()

        wait_ms = (datetime.now(timezone.utc) - prompt.created_at).total_seconds() * 1000
        if reason is None:
            self._stats.prompts_resolved += 1
            self._hooks.emit_counter(METRIC_PROMPT_RESOLVED, tags={"kind": prompt.kind})
            self._hooks.emit_timing(METRIC_PROMPT_WAIT, wait_ms, tags={"outcome": "resolved"})
            logger.debug(f"Prompt {prompt.id} resolved")
        else:
            self._stats.prompts_canceled[reason] += 1
            self._hooks.emit_counter(METRIC_PROMPT_CANCELED, tags={"reason": reason})
            self._hooks.emit_timing(METRIC_PROMPT_WAIT, wait_ms, tags={"outcome": "canceled"})
            logger.debug(f"Prompt {prompt.id} canceled ({reason})")

        self._undelivered.append((prompt, None if reason is not None else value))

    # ------------------------------------------------------------------
    # Slot management
    # ------------------------------------------------------------------

    def _should_preempt(self, prompt: InputPrompt) -> bool:
        return (
            self._prioritize
            and self._current is None
            and self._visible is not None
            and prompt.priority > self._visible.prompt.priority
        )

    def _preempt(self, prompt: InputPrompt) -> None:
        display = self._visible
        self._visible = None
        display.prompt.suspended = True
        self._stats.preemptions += 1
        self._hooks.emit_counter(METRIC_DISPLAY_PREEMPTED)
        logger.debug(f"Prompt {prompt.id} preempts display {display.id}")
        self._emit(EventType.DISPLAY_SUSPENDED, display.id)
        self._activate(prompt)

    def _activate(self, prompt: InputPrompt) -> None:
        self._current = prompt
        self._emit(EventType.PROMPT_SHOWN, prompt.id, kind=prompt.kind)
        self._notify()

    def _process_queue(self) -> None:
        """
        Fill the slot if it is free.

        Idempotent: does nothing while a prompt or display holds the slot.
        Listeners notified from here may re-enter the manager; nothing
        below the activation reads state that re-entry could change.
        """
        if self._current is not None or self._visible is not None:
            return

        prompt = self._queue.dequeue()
        if prompt is not None:
            self._emit_queue_gauge()
            self._activate(prompt)
            return

        display = self._displays.next_waiting()
        if display is not None:
            display.prompt.suspended = False
            self._visible = display
            logger.debug(f"Display {display.id} resumed")
            self._emit(EventType.DISPLAY_RESUMED, display.id)
            self._notify()

    # ------------------------------------------------------------------
    # Displays
    # ------------------------------------------------------------------

    def display(self, options: DisplayOptions | None = None, **overrides: Any) -> DisplayHandle:
        """
        Start a streaming display.

        The display takes the slot if it is free; otherwise it waits,
        buffering updates, until no prompt needs the slot.

        Args:
            options: Display options; keyword arguments build or override them.

        Returns:
            Handle with the value stream and update/cancel operations.

        Raises:
            NotInitializedError: If the manager has no config.
        """
        config = self._require_config("display")
        options = _build_options(DisplayOptions, options, overrides)

        priority = options.priority if options.priority is not None else config.default_display_priority
        prompt = DisplayPrompt(
            id=generate_id(),
            message=options.message,
            kind=options.kind,
            priority=priority,
            meta=dict(options.meta),
            current_value=options.initial_value,
        )
        channel = DisplayChannel(prompt, on_close=self.cancel_display)
        if options.initial_value is not None:
            channel.push(options.initial_value)

        with self._transition():
            self._displays.add(channel)
            if self._current is None and self._visible is None:
                self._visible = channel
            else:
                prompt.suspended = True

            self._stats.displays_started += 1
            self._hooks.emit_counter(METRIC_DISPLAY_STARTED, tags={"kind": prompt.kind})
            self._emit(EventType.DISPLAY_STARTED, prompt.id, kind=prompt.kind)
            self._notify()

        return DisplayHandle(
            channel,
            update=lambda value: self.update_display(prompt.id, value),
            cancel=lambda: self.cancel_display(prompt.id),
        )

    def update_display(self, display_id: str, value: Any) -> bool:
        """
        Push a value to a display.

        Returns:
            False if the display is unknown or cancelled (the value is dropped).
        """
        with self._transition():
            channel = self._displays.get(display_id)
            if channel is None or channel.cancelled:
                return False

            channel.prompt.current_value = value
            channel.push(value)
            self._stats.display_updates += 1
            self._hooks.emit_counter(METRIC_DISPLAY_UPDATES)
            self._emit(EventType.DISPLAY_UPDATED, display_id, value=value)
            self._notify()
            return True

    def cancel_display(self, display_id: str) -> bool:
        """
        Cancel a display and end its stream.

        Returns:
            True if the display was active.
        """
        with self._transition():
            channel = self._displays.remove(display_id)
            if channel is None:
                return False

            channel.close()
            was_visible = self._visible is channel
            if was_visible:
                self._visible = None

            self._stats.displays_canceled += 1
            self._hooks.emit_counter(METRIC_DISPLAY_CANCELED)
            self._emit(EventType.DISPLAY_CANCELED, display_id)
            self._notify()
            if was_visible:
                self._process_queue()
            return True

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def get_active(self) -> InputPrompt | None:
        """The prompt holding the slot, if any."""
        return self._current

    def get_visible_display(self) -> DisplayPrompt | None:
        """The display holding the slot, if any."""
        visible = self._visible
        return visible.prompt if visible is not None else None

    def get_foreground(self) -> InputPrompt | DisplayPrompt | None:
        """Whatever holds the slot: a prompt, a display, or nothing."""
        with self._lock:
            if self._current is not None:
                return self._current
            return self.get_visible_display()

    def get_queue_length(self) -> int:
        """Number of prompts waiting behind the active one."""
        return len(self._queue)

    def get_queue_snapshot(self) -> list[InputPrompt]:
        """Waiting prompts in the order they will be shown."""
        with self._lock:
            return self._queue.snapshot()

    def get_active_displays(self) -> list[DisplayPrompt]:
        """Every display that has not been cancelled, visible or not."""
        with self._lock:
            return self._displays.prompts()

    def get_renderer(self, kind: str | None = None) -> Any | None:
        """
        Look up the renderer for a kind.

        Args:
            kind: Prompt kind; None selects the default renderer.

        Returns:
            The renderer, or None if uninitialised or not registered.
        """
        if self._config is None:
            return None
        return self._renderers.resolve(kind)

    def get_stats(self) -> dict[str, Any]:
        """Get manager statistics."""
        with self._lock:
            current = self._current
            visible = self._visible
            return {
                "initialized": self.is_initialized(),
                "prioritize_awaiting_inputs": self._prioritize,
                "active_prompt": current.id if current else None,
                "visible_display": visible.id if visible else None,
                "active_displays": len(self._displays),
                "queue": self._queue.get_stats(),
                "prompts": {
                    "submitted": self._stats.prompts_submitted,
                    "resolved": self._stats.prompts_resolved,
                    "canceled": dict(self._stats.prompts_canceled),
                },
                "displays": {
                    "started": self._stats.displays_started,
                    "updates": self._stats.display_updates,
                    "canceled": self._stats.displays_canceled,
                    "preemptions": self._stats.preemptions,
                },
            }

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """
        Listen for state changes (used to trigger re-renders).

        Returns:
            A function that unsubscribes the listener.
        """
        return self._listeners.subscribe(listener)

    def subscribe_events(self, listener: Callable[[InputEvent], None]) -> Callable[[], None]:
        """
        Listen for lifecycle events.

        Returns:
            A function that unsubscribes the listener.
        """
        return self._event_listeners.subscribe(listener)

    def _notify(self) -> None:
        self._listeners.call()

    def _emit(self, event_type: EventType, event_id: str, **fields: Any) -> None:
        self._event_listeners.call(InputEvent.create(event_type, event_id, **fields))

    def _emit_queue_gauge(self) -> None:
        self._hooks.emit_gauge(METRIC_QUEUE_LENGTH, len(self._queue))

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """
        Cancel every prompt and display and stop accepting new ones.

        Prompts settle with None (reason ``shutdown``). ``init()`` may be
        called again to reopen the manager.
        """
        with self._transition():
            if self._closed:
                return
            self._closed = True

            prompts = [self._current] if self._current is not None else []
            prompts.extend(self._queue.clear())
            self._current = None
            for prompt in prompts:
                self._settle(prompt, None, CancelReason.SHUTDOWN.value)
                self._emit(EventType.PROMPT_CANCELED, prompt.id, reason=CancelReason.SHUTDOWN.value)

            self._visible = None
            for channel in self._displays.clear():
                channel.close()
                self._stats.displays_canceled += 1
                self._emit(EventType.DISPLAY_CANCELED, channel.id)

            self._notify()
        logger.info("InputManager closed")

    def __enter__(self) -> InputManager:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def _build_options(cls: type, options: Any, overrides: dict[str, Any]) -> Any:
    if options is None:
        return cls(**overrides)
    if overrides:
        return dataclasses.replace(options, **overrides)
    return options


def _reason_value(reason: CancelReason | str) -> str:
    if isinstance(reason, CancelReason):
        return reason.value
    return str(reason)
