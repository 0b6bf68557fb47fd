"""
Metric hooks for promptslot.

The manager reports prompt and display lifecycle metrics through an
ObservabilityHooks registry. No metrics backend is bundled: register any
object implementing MetricHook (Prometheus, StatsD, OpenTelemetry, ...).

Quick Start:
    >>> from promptslot import InputManager, InputConfig
    >>> from promptslot.observability import ObservabilityHooks, InMemoryMetricHook
    >>>
    >>> hooks = ObservabilityHooks()
    >>> memory_hook = InMemoryMetricHook()
    >>> hooks.add_metric_hook(memory_hook)
    >>>
    >>> manager = InputManager(config, hooks=hooks)
    >>> future = manager.submit(message="Name?")
    >>> memory_hook.get_counter(METRIC_PROMPT_SUBMITTED)
    1.0
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class MetricType(Enum):
    """Types of metrics the manager emits."""

    COUNTER = "counter"
    """A monotonically increasing counter."""

    GAUGE = "gauge"
    """A value that can go up or down."""

    TIMING = "timing"
    """Duration measurement in milliseconds."""


@runtime_checkable
class MetricHook(Protocol):
    """
    Protocol for metric backends.

    Example:
        >>> class StatsdHook:
        ...     def increment(self, name, value=1.0, tags=None):
        ...         statsd.incr(name, value, tags=tags)
        ...
        ...     def gauge(self, name, value, tags=None):
        ...         statsd.gauge(name, value, tags=tags)
        ...
        ...     def timing(self, name, duration_ms, tags=None):
        ...         statsd.timing(name, duration_ms, tags=tags)
    """

    def increment(self, name: str, value: float = 1.0, tags: dict[str, Any] | None = None) -> None:
        """Increment a counter metric."""
        ...

    def gauge(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        """Set a gauge metric."""
        ...

    def timing(self, name: str, duration_ms: float, tags: dict[str, Any] | None = None) -> None:
        """Record a duration in milliseconds."""
        ...


class LoggingMetricHook:
    """
    Hook that writes metrics to a logger (for development and debugging).

    Example:
        >>> import logging
        >>> logging.basicConfig(level=logging.DEBUG)
        >>> hook = LoggingMetricHook()
        >>> hook.increment("promptslot.prompt.resolved")
        DEBUG:promptslot.metrics:COUNTER promptslot.prompt.resolved=1.0 tags=None
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.DEBUG):
        """
        Initialize the logging hook.

        Args:
            logger: Logger instance to use. Defaults to "promptslot.metrics".
            level: Logging level for metric messages.
        """
        self.logger = logger or logging.getLogger("promptslot.metrics")
        self.level = level

    def increment(self, name: str, value: float = 1.0, tags: dict[str, Any] | None = None) -> None:
        self.logger.log(self.level, f"COUNTER {name}={value} tags={tags}")

    def gauge(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        self.logger.log(self.level, f"GAUGE {name}={value} tags={tags}")

    def timing(self, name: str, duration_ms: float, tags: dict[str, Any] | None = None) -> None:
        self.logger.log(self.level, f"TIMING {name}={duration_ms}ms tags={tags}")


@dataclass
class TimingStats:
    """Summary of recorded timings."""

    count: int
    total: float
    min: float
    max: float
    avg: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "count": self.count,
            "total": self.total,
            "min": self.min,
            "max": self.max,
            "avg": self.avg,
        }


class InMemoryMetricHook:
    """
    In-memory metrics for tests and simple dashboards.

    Example:
        >>> hook = InMemoryMetricHook()
        >>> hook.increment("promptslot.prompt.canceled", tags={"reason": "timeout"})
        >>> hook.get_counter("promptslot.prompt.canceled", {"reason": "timeout"})
        1.0
    """

    def __init__(self):
        self.counters: dict[str, float] = defaultdict(float)
        self.gauges: dict[str, float] = {}
        self.timings: dict[str, list[float]] = defaultdict(list)

    def _make_key(self, name: str, tags: dict[str, Any] | None) -> str:
        """Create a unique key from metric name and tags."""
        if not tags:
            return name
        tag_str = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
        return f"{name}[{tag_str}]"

    def increment(self, name: str, value: float = 1.0, tags: dict[str, Any] | None = None) -> None:
        self.counters[self._make_key(name, tags)] += value

    def gauge(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        self.gauges[self._make_key(name, tags)] = value

    def timing(self, name: str, duration_ms: float, tags: dict[str, Any] | None = None) -> None:
        self.timings[self._make_key(name, tags)].append(duration_ms)

    def get_counter(self, name: str, tags: dict[str, Any] | None = None) -> float:
        """Current counter value, or 0.0 if never incremented."""
        return self.counters.get(self._make_key(name, tags), 0.0)

    def get_gauge(self, name: str, tags: dict[str, Any] | None = None) -> float | None:
        """Current gauge value, or None if never set."""
        return self.gauges.get(self._make_key(name, tags))

    def get_timing_stats(
        self, name: str, tags: dict[str, Any] | None = None
    ) -> TimingStats | None:
        """
        Summarise recorded timings.

        Returns:
            TimingStats, or None if nothing was recorded.
        """
        values = self.timings.get(self._make_key(name, tags), [])
        if not values:
            return None
        return TimingStats(
            count=len(values),
            total=sum(values),
            min=min(values),
            max=max(values),
            avg=sum(values) / len(values),
        )

    def reset(self) -> None:
        """Reset all metrics."""
        self.counters.clear()
        self.gauges.clear()
        self.timings.clear()


class ObservabilityHooks:
    """
    Registry of metric hooks.

    Each InputManager takes its own instance. ``get_instance()`` returns a
    process-wide one for the module-level convenience API.
    """

    _instance: ObservabilityHooks | None = None

    def __init__(self):
        self._metric_hooks: list[MetricHook] = []

    @classmethod
    def get_instance(cls) -> ObservabilityHooks:
        """Get the process-wide instance, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the process-wide instance (useful in tests)."""
        cls._instance = None

    def add_metric_hook(self, hook: MetricHook) -> None:
        """Register a metric hook."""
        self._metric_hooks.append(hook)

    def remove_metric_hook(self, hook: MetricHook) -> bool:
        """Remove a metric hook. Returns True if it was registered."""
        try:
            self._metric_hooks.remove(hook)
            return True
        except ValueError:
            return False

    def clear_metric_hooks(self) -> None:
        """Remove all registered metric hooks."""
        self._metric_hooks.clear()

    @property
    def metric_hooks(self) -> list[MetricHook]:
        """Copy of the registered metric hooks."""
        return list(self._metric_hooks)

    def emit_metric(
        self,
        metric_type: MetricType,
        name: str,
        value: float,
        tags: dict[str, Any] | None = None,
    ) -> None:
        """
        Send a metric to every registered hook.

        A failing hook is logged and skipped; metrics never interrupt
        the scheduler.
        """
        for hook in self._metric_hooks:
            try:
                if metric_type == MetricType.COUNTER:
                    hook.increment(name, value, tags)
                elif metric_type == MetricType.GAUGE:
                    hook.gauge(name, value, tags)
                elif metric_type == MetricType.TIMING:
                    hook.timing(name, value, tags)
            except Exception as e:
                logger.error(f"Metric hook {type(hook).__name__} failed on {name}: {e}")

    def emit_counter(
        self, name: str, value: float = 1.0, tags: dict[str, Any] | None = None
    ) -> None:
        self.emit_metric(MetricType.COUNTER, name, value, tags)

    def emit_gauge(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        self.emit_metric(MetricType.GAUGE, name, value, tags)

    def emit_timing(
        self, name: str, duration_ms: float, tags: dict[str, Any] | None = None
    ) -> None:
        self.emit_metric(MetricType.TIMING, name, duration_ms, tags)


# Standard metric names emitted by InputManager

METRIC_PROMPT_SUBMITTED = "promptslot.prompt.submitted"
"""Counter: Prompts submitted."""

METRIC_PROMPT_RESOLVED = "promptslot.prompt.resolved"
"""Counter: Prompts resolved with a value."""

METRIC_PROMPT_CANCELED = "promptslot.prompt.canceled"
"""Counter: Prompts cancelled, tagged with reason."""

METRIC_PROMPT_WAIT = "promptslot.prompt.wait_ms"
"""Timing: Submission-to-settlement time, tagged with outcome."""

METRIC_QUEUE_LENGTH = "promptslot.queue.length"
"""Gauge: Prompts waiting behind the active one."""

METRIC_DISPLAY_STARTED = "promptslot.display.started"
"""Counter: Displays created."""

METRIC_DISPLAY_UPDATES = "promptslot.display.updates"
"""Counter: Values pushed to displays."""

METRIC_DISPLAY_CANCELED = "promptslot.display.canceled"
"""Counter: Displays cancelled."""

METRIC_DISPLAY_PREEMPTED = "promptslot.display.preempted"
"""Counter: Displays suspended by a higher-priority prompt."""
